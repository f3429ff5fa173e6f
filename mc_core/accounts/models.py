# mc_core/accounts/models.py
from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from mc_core.common.models import DocumentModel, TimeStampedModel


class AccountRole(models.TextChoices):
    PATIENT = "patient", "Patient"
    DOCTOR = "doctor", "Doctor"
    PHARMACY = "pharmacy", "Pharmacy"
    ADMIN = "admin", "Admin"


class Account(DocumentModel):
    """
    Registered participant, anchored one-to-one to Django's AUTH_USER_MODEL.

    Role-specific data lives in exactly one of PatientProfile / DoctorProfile /
    PharmacyProfile (see `Account.profile`).
    """
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="account")

    role = models.CharField(max_length=16, choices=AccountRole.choices, db_index=True)
    display_name = models.CharField(max_length=255)
    phone = models.CharField(max_length=32, blank=True, default="")
    photo_path = models.CharField(max_length=512, blank=True, default="")

    # Doctors only: flipped by an admin. Other roles are created verified.
    verified = models.BooleanField(default=False, db_index=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)

    profile_completed = models.BooleanField(default=False)

    class Meta:
        db_table = "accounts_account"
        indexes = [
            models.Index(fields=["role", "verified"]),
        ]

    def __str__(self) -> str:
        return f"{self.display_name} ({self.role})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            stored_role = (
                Account.objects.filter(pk=self.pk).values_list("role", flat=True).first()
            )
            if stored_role is not None and stored_role != self.role:
                raise ValidationError("Account role cannot be changed after creation.")
        return super().save(*args, **kwargs)

    @property
    def email(self) -> str:
        return self.user.email

    @property
    def profile(self):
        related = PROFILE_RELATED_NAME.get(self.role)
        if not related:
            return None
        return getattr(self, related, None)


class PatientProfile(TimeStampedModel):
    account = models.OneToOneField(Account, on_delete=models.CASCADE, related_name="patient_profile")

    date_of_birth = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=32, blank=True, default="")
    address = models.TextField(blank=True, default="")
    blood_group = models.CharField(max_length=8, blank=True, default="")
    allergies = models.TextField(blank=True, default="")
    emergency_contact = models.CharField(max_length=64, blank=True, default="")

    class Meta:
        db_table = "accounts_patient_profile"


class DoctorProfile(TimeStampedModel):
    account = models.OneToOneField(Account, on_delete=models.CASCADE, related_name="doctor_profile")

    specialization = models.CharField(max_length=128, blank=True, default="", db_index=True)
    license_number = models.CharField(max_length=64, blank=True, default="")
    years_of_experience = models.PositiveIntegerField(null=True, blank=True)
    hospital = models.CharField(max_length=255, blank=True, default="")
    consultation_fee = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    bio = models.TextField(blank=True, default="")
    license_document_path = models.CharField(max_length=512, blank=True, default="")

    class Meta:
        db_table = "accounts_doctor_profile"


class PharmacyProfile(TimeStampedModel):
    account = models.OneToOneField(Account, on_delete=models.CASCADE, related_name="pharmacy_profile")

    pharmacy_name = models.CharField(max_length=255, blank=True, default="")
    license_number = models.CharField(max_length=64, blank=True, default="")
    address = models.TextField(blank=True, default="")
    opening_hours = models.CharField(max_length=128, blank=True, default="")
    delivery_available = models.BooleanField(default=True)
    license_document_path = models.CharField(max_length=512, blank=True, default="")

    class Meta:
        db_table = "accounts_pharmacy_profile"


PROFILE_MODELS = {
    AccountRole.PATIENT: PatientProfile,
    AccountRole.DOCTOR: DoctorProfile,
    AccountRole.PHARMACY: PharmacyProfile,
}

PROFILE_RELATED_NAME = {
    AccountRole.PATIENT: "patient_profile",
    AccountRole.DOCTOR: "doctor_profile",
    AccountRole.PHARMACY: "pharmacy_profile",
}

# Per-variant required fields; profile_completed is derived from these.
REQUIRED_PROFILE_FIELDS = {
    AccountRole.PATIENT: ("date_of_birth", "gender", "address"),
    AccountRole.DOCTOR: ("specialization", "license_number", "years_of_experience"),
    AccountRole.PHARMACY: ("pharmacy_name", "license_number", "address"),
    AccountRole.ADMIN: (),
}

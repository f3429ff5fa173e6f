# mc_core/appointments/models.py
from __future__ import annotations

from django.conf import settings
from django.db import models

from mc_core.common.models import DocumentModel
from mc_core.common.timeutils import to_24_hour


class AppointmentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    RECEIVED = "received", "Received"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class Appointment(DocumentModel):
    """
    Patient ⇄ doctor booking.

    `date` is kept as the booked "YYYY-MM-DD" string and `time` as entered
    (24-hour "14:30" or "2:30 PM"). `time_24` holds the zero-padded 24-hour
    form so database ordering matches timeutils.slot_key.
    """
    patient = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="patient_appointments")
    doctor = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="doctor_appointments")

    date = models.CharField(max_length=10, db_index=True)
    time = models.CharField(max_length=16)
    time_24 = models.CharField(max_length=5, editable=False, default="")
    reason = models.TextField(blank=True, default="")

    status = models.CharField(
        max_length=16,
        choices=AppointmentStatus.choices,
        default=AppointmentStatus.PENDING,
        db_index=True,
    )

    cancellation_reason = models.TextField(blank=True, default="")
    cancelled_by_role = models.CharField(max_length=16, blank=True, default="")
    cancelled_at = models.DateTimeField(null=True, blank=True)
    received_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "appointments_appointment"
        ordering = ["date", "time_24"]
        indexes = [
            models.Index(fields=["patient", "status"]),
            models.Index(fields=["doctor", "status"]),
            models.Index(fields=["doctor", "date"]),
        ]

    def save(self, *args, **kwargs):
        self.time_24 = to_24_hour(self.time)
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "time" in update_fields:
            kwargs["update_fields"] = {*update_fields, "time_24"}
        return super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"Appointment {self.id} {self.date} {self.time} ({self.status})"

# mc_core/accounts/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from mc_core.accounts.models import (
    Account,
    AccountRole,
    DoctorProfile,
    PatientProfile,
    PharmacyProfile,
)


class PatientProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = PatientProfile
        fields = ["date_of_birth", "gender", "address", "blood_group", "allergies", "emergency_contact"]


class DoctorProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = DoctorProfile
        fields = [
            "specialization",
            "license_number",
            "years_of_experience",
            "hospital",
            "consultation_fee",
            "bio",
            "license_document_path",
        ]


class PharmacyProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = PharmacyProfile
        fields = [
            "pharmacy_name",
            "license_number",
            "address",
            "opening_hours",
            "delivery_available",
            "license_document_path",
        ]


PROFILE_SERIALIZERS = {
    AccountRole.PATIENT: PatientProfileSerializer,
    AccountRole.DOCTOR: DoctorProfileSerializer,
    AccountRole.PHARMACY: PharmacyProfileSerializer,
}


class AccountSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)
    email = serializers.EmailField(read_only=True)
    profile = serializers.SerializerMethodField()

    class Meta:
        model = Account
        fields = [
            "id",
            "user_id",
            "email",
            "role",
            "display_name",
            "phone",
            "photo_path",
            "verified",
            "approved_at",
            "rejected_at",
            "profile_completed",
            "profile",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_profile(self, obj: Account):
        ser = PROFILE_SERIALIZERS.get(obj.role)
        profile = obj.profile
        if ser is None or profile is None:
            return None
        return ser(profile).data


class RegisterSerializer(serializers.Serializer):
    email = serializers.CharField(max_length=254)
    password = serializers.CharField(write_only=True)
    confirm_password = serializers.CharField(write_only=True, required=False)
    role = serializers.ChoiceField(choices=[r for r in AccountRole.choices if r[0] != AccountRole.ADMIN])
    display_name = serializers.CharField(max_length=255)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    profile = serializers.DictField(required=False, default=dict)


class AdminCreateAccountSerializer(RegisterSerializer):
    role = serializers.ChoiceField(choices=AccountRole.choices)
    verified = serializers.BooleanField(required=False, default=True)


class ProfileUpdateSerializer(serializers.Serializer):
    """
    Free-form merge payload; services decide which keys apply to the account's variant.
    """
    display_name = serializers.CharField(max_length=255, required=False)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    profile = serializers.DictField(required=False, default=dict)


class LoginRequestSerializer(serializers.Serializer):
    email = serializers.CharField()
    password = serializers.CharField(write_only=True)


class LoginResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()
    account = AccountSerializer(allow_null=True)
    dashboard = serializers.CharField(allow_null=True)


class DetailResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()


class PasswordResetRequestSerializer(serializers.Serializer):
    email = serializers.CharField()


class RouteCheckResponseSerializer(serializers.Serializer):
    path = serializers.CharField()
    allowed = serializers.BooleanField()
    redirect_to = serializers.CharField(allow_null=True)


class FileUploadSerializer(serializers.Serializer):
    file = serializers.FileField()

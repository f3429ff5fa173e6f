# mc_core/accounts/admin.py
from __future__ import annotations

from django.contrib import admin

from mc_core.accounts.models import Account, DoctorProfile, PatientProfile, PharmacyProfile


class PatientProfileInline(admin.StackedInline):
    model = PatientProfile
    extra = 0


class DoctorProfileInline(admin.StackedInline):
    model = DoctorProfile
    extra = 0


class PharmacyProfileInline(admin.StackedInline):
    model = PharmacyProfile
    extra = 0


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = ("display_name", "role", "user", "verified", "profile_completed", "created_at")
    list_filter = ("role", "verified", "profile_completed")
    search_fields = ("display_name", "user__username", "user__email")
    readonly_fields = ("role", "approved_at", "rejected_at", "created_at", "updated_at")
    inlines = [PatientProfileInline, DoctorProfileInline, PharmacyProfileInline]
    ordering = ("-created_at",)


@admin.register(DoctorProfile)
class DoctorProfileAdmin(admin.ModelAdmin):
    list_display = ("account", "specialization", "license_number", "years_of_experience")
    search_fields = ("account__display_name", "specialization", "license_number")

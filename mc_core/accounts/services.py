# mc_core/accounts/services.py

from __future__ import annotations

import logging
from typing import Any, Optional

from django.contrib.auth import get_user_model
from django.contrib.auth.forms import PasswordResetForm
from django.db import transaction
from django.utils import timezone

from mc_core.accounts.errors import AuthError
from mc_core.accounts.models import (
    PROFILE_MODELS,
    REQUIRED_PROFILE_FIELDS,
    Account,
    AccountRole,
)
from mc_core.accounts.permissions import account_of, require_role
from mc_core.common.exceptions import InputValidationError, RoleNotPermitted
from mc_core.common.lookups import get_record
from mc_core.common.validation import (
    require,
    sanitize_input,
    validate_email,
    validate_password,
    validate_phone,
)
from mc_core.notifications.models import NotificationType
from mc_core.notifications.services import NotificationService
from mc_core.storage.blobs import (
    DOCUMENT_TYPES,
    IMAGE_TYPES,
    BlobStore,
    doctor_document_path,
    pharmacy_document_path,
    profile_photo_folder,
    profile_photo_path,
)

logger = logging.getLogger(__name__)

ACCOUNT_FIELDS = ("display_name", "phone")

# Written only by the upload services.
PROFILE_READ_ONLY_FIELDS = {"id", "account", "created_at", "updated_at", "license_document_path"}


def _profile_is_complete(account: Account) -> bool:
    required = REQUIRED_PROFILE_FIELDS.get(account.role, ())
    profile = account.profile
    if required and profile is None:
        return False
    for name in required:
        value = getattr(profile, name, None)
        if value in (None, ""):
            return False
    return bool(account.display_name)


class AccountService:
    """
    Account write-model operations.

    Notes:
    - Role is fixed at creation (Account.save enforces it).
    - Doctors start unverified; only an admin flips `verified`.
    - Profile edits are merges: only the provided fields change.
    """

    # -------------------------
    # Internal helpers
    # -------------------------
    @staticmethod
    def _apply_profile_fields(account: Account, fields: dict[str, Any]) -> list[str]:
        profile = account.profile
        if profile is None:
            return []

        allowed = {f.name for f in profile._meta.concrete_fields} - PROFILE_READ_ONLY_FIELDS
        changed: list[str] = []
        for name, value in fields.items():
            if name not in allowed:
                continue
            if isinstance(value, str):
                value = sanitize_input(value)
            if getattr(profile, name) != value:
                setattr(profile, name, value)
                changed.append(name)

        if changed:
            profile.save(update_fields=changed + ["updated_at"])
        return changed

    @staticmethod
    def _refresh_completion(account: Account) -> None:
        complete = _profile_is_complete(account)
        if account.profile_completed != complete:
            account.profile_completed = complete
            account.save(update_fields=["profile_completed", "updated_at"])

    # -------------------------
    # Registration
    # -------------------------
    @staticmethod
    @transaction.atomic
    def register(
        *,
        email: str,
        password: str,
        role: str,
        display_name: str,
        phone: str = "",
        profile: Optional[dict[str, Any]] = None,
        confirm_password: str | None = None,
        verified: bool | None = None,
        allow_admin: bool = False,
    ) -> Account:
        """
        Creates User + Account + role profile.
        Validation happens before any write.
        """
        if role not in AccountRole.values:
            raise InputValidationError("Unknown account type.", details={"field": "role"})
        if role == AccountRole.ADMIN and not allow_admin:
            raise RoleNotPermitted("Admin accounts cannot be self-registered.")

        try:
            email = validate_email(email)
        except InputValidationError:
            raise AuthError("invalid-email")
        try:
            validate_password(password, confirm_password)
        except InputValidationError as e:
            if e.details and e.details.get("field") == "confirm_password":
                raise
            raise InputValidationError(e.message, details={"field": "password", "auth_code": "weak-password"})

        display_name = sanitize_input(require(display_name, "display_name", "Full name is required."))
        if phone:
            phone = validate_phone(phone)

        User = get_user_model()
        if User.objects.filter(email__iexact=email).exists():
            raise AuthError("email-already-in-use")

        user = User.objects.create_user(username=email, email=email, password=password)

        if verified is None:
            verified = role != AccountRole.DOCTOR

        account = Account.objects.create(
            user=user,
            role=role,
            display_name=display_name,
            phone=phone,
            verified=verified,
        )

        profile_model = PROFILE_MODELS.get(role)
        if profile_model is not None:
            profile_model.objects.create(account=account)
            AccountService._apply_profile_fields(account, profile or {})

        AccountService._refresh_completion(account)
        logger.info("Registered %s account %s", role, account.id)
        return account

    @staticmethod
    @transaction.atomic
    def create_by_admin(*, actor, **kwargs) -> Account:
        require_role(actor, AccountRole.ADMIN)
        return AccountService.register(**kwargs)

    # -------------------------
    # Profile edits (owner)
    # -------------------------
    @staticmethod
    @transaction.atomic
    def update_profile(*, actor, account_id=None, fields: dict[str, Any]) -> Account:
        me = require_role(actor)
        account = me if account_id is None else get_record(Account, message="Account not found.", id=account_id)
        if account.id != me.id and me.role != AccountRole.ADMIN:
            raise RoleNotPermitted("You can only edit your own profile.")
        if "role" in fields and fields["role"] != account.role:
            raise InputValidationError("Account role cannot be changed.", details={"field": "role"})
        if "verified" in fields:
            raise RoleNotPermitted("Verification is managed by administrators.")

        changed: list[str] = []
        for name in ACCOUNT_FIELDS:
            if name not in fields:
                continue
            value = fields[name]
            if name == "phone" and value:
                value = validate_phone(value)
            elif isinstance(value, str):
                value = sanitize_input(value)
            if name == "display_name":
                require(value, "display_name", "Full name is required.")
            if getattr(account, name) != value:
                setattr(account, name, value)
                changed.append(name)
        if changed:
            account.save(update_fields=changed + ["updated_at"])

        AccountService._apply_profile_fields(account, fields)
        account.refresh_from_db()
        AccountService._refresh_completion(account)
        return account

    # -------------------------
    # Uploads (owner)
    # -------------------------
    @staticmethod
    def upload_photo(*, actor, upload, blob_store: BlobStore | None = None) -> Account:
        """
        Stores the file first, then points the account at it; the previous photo is removed.
        """
        account = require_role(actor)
        store = blob_store or BlobStore()
        result = store.upload(
            profile_photo_path(account.user_id, upload.name),
            upload,
            content_type=getattr(upload, "content_type", None),
            allowed_types=IMAGE_TYPES,
        )

        previous = account.photo_path
        with transaction.atomic():
            account.photo_path = result.path
            account.save(update_fields=["photo_path", "updated_at"])
        if previous and previous != result.path and previous.startswith(profile_photo_folder(account.user_id)):
            store.delete(previous)
        return account

    @staticmethod
    def upload_license_document(*, actor, upload, blob_store: BlobStore | None = None) -> Account:
        account = require_role(actor, AccountRole.DOCTOR, AccountRole.PHARMACY)
        path_for = doctor_document_path if account.role == AccountRole.DOCTOR else pharmacy_document_path
        store = blob_store or BlobStore()
        result = store.upload(
            path_for(account.user_id, upload.name),
            upload,
            content_type=getattr(upload, "content_type", None),
            allowed_types=DOCUMENT_TYPES,
        )

        profile = account.profile
        with transaction.atomic():
            profile.license_document_path = result.path
            profile.save(update_fields=["license_document_path", "updated_at"])
        logger.info("License document stored for %s account %s", account.role, account.id)
        return account

    # -------------------------
    # Admin: doctor verification
    # -------------------------
    @staticmethod
    def _get_doctor(doctor_account_id) -> Account:
        doctor = get_record(Account, message="Doctor not found.", id=doctor_account_id)
        if doctor.role != AccountRole.DOCTOR:
            raise InputValidationError("Only doctor accounts can be verified.", details={"role": doctor.role})
        return doctor

    @staticmethod
    @transaction.atomic
    def approve_doctor(*, actor, doctor_account_id) -> Account:
        require_role(actor, AccountRole.ADMIN)
        doctor = AccountService._get_doctor(doctor_account_id)

        doctor.verified = True
        doctor.approved_at = timezone.now()
        doctor.rejected_at = None
        doctor.save(update_fields=["verified", "approved_at", "rejected_at", "updated_at"])

        NotificationService.notify(
            recipient_id=doctor.user_id,
            title="Account approved",
            message="Your doctor account has been verified. Patients can now book appointments with you.",
            type=NotificationType.ACCOUNT_UPDATE,
            related_id=doctor.id,
        )
        return doctor

    @staticmethod
    @transaction.atomic
    def reject_doctor(*, actor, doctor_account_id) -> Account:
        require_role(actor, AccountRole.ADMIN)
        doctor = AccountService._get_doctor(doctor_account_id)

        doctor.verified = False
        doctor.rejected_at = timezone.now()
        doctor.save(update_fields=["verified", "rejected_at", "updated_at"])

        NotificationService.notify(
            recipient_id=doctor.user_id,
            title="Account not approved",
            message="Your doctor account could not be verified. Please contact support.",
            type=NotificationType.ACCOUNT_UPDATE,
            related_id=doctor.id,
        )
        return doctor

    # -------------------------
    # Deletion (admin or owner)
    # -------------------------
    @staticmethod
    @transaction.atomic
    def delete_account(*, actor, account_id) -> None:
        me = account_of(actor)
        target = get_record(Account, message="Account not found.", id=account_id)

        is_owner = me is not None and me.id == target.id
        is_admin = me is not None and me.role == AccountRole.ADMIN
        if not (is_owner or is_admin):
            raise RoleNotPermitted("You cannot delete this account.")
        if target.role == AccountRole.ADMIN and not is_owner:
            raise RoleNotPermitted("Admin accounts can only be removed by their owner.")

        logger.info("Deleting %s account %s", target.role, target.id)
        # Cascades to Account and role profile.
        target.user.delete()


class IdentityService:
    """
    Credential checks and password reset, classified by stable error codes.
    """

    @staticmethod
    def authenticate(*, email: str, password: str):
        try:
            email = validate_email(email)
        except InputValidationError:
            raise AuthError("invalid-email")

        User = get_user_model()
        user = User.objects.filter(email__iexact=email).first()
        if user is None:
            raise AuthError("user-not-found")
        if not user.is_active:
            raise AuthError("user-disabled")
        if not user.check_password(password or ""):
            raise AuthError("wrong-password")

        user.last_login = timezone.now()
        user.save(update_fields=["last_login"])
        return user

    @staticmethod
    def request_password_reset(*, email: str, domain: str = "mediconnect.local", use_https: bool = False) -> None:
        try:
            email = validate_email(email)
        except InputValidationError:
            raise AuthError("invalid-email", password_reset=True)

        User = get_user_model()
        if not User.objects.filter(email__iexact=email, is_active=True).exists():
            raise AuthError("user-not-found", password_reset=True)

        form = PasswordResetForm(data={"email": email})
        if not form.is_valid():
            raise AuthError("invalid-email", password_reset=True)
        form.save(domain_override=domain, use_https=use_https)

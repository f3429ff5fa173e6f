import pytest
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import SimpleUploadedFile

from mc_core.accounts.models import DoctorProfile
from mc_core.accounts.services import AccountService
from mc_core.common.exceptions import InputValidationError, RoleNotPermitted

pytestmark = pytest.mark.django_db


def _png(name="me.png"):
    return SimpleUploadedFile(name, b"\x89PNG data", content_type="image/png")


def test_photo_upload_replaces_previous(patient_account):
    first = AccountService.upload_photo(actor=patient_account.user, upload=_png("one.png"))
    old_path = first.photo_path
    assert old_path.startswith(f"users/{patient_account.user_id}/profile/")

    second = AccountService.upload_photo(actor=patient_account.user, upload=_png("two.png"))
    assert second.photo_path.endswith("_two.png")
    assert default_storage.exists(second.photo_path)
    assert not default_storage.exists(old_path)


def test_photo_must_be_an_image(patient_account):
    pdf = SimpleUploadedFile("cv.pdf", b"%PDF-1.4", content_type="application/pdf")
    with pytest.raises(InputValidationError):
        AccountService.upload_photo(actor=patient_account.user, upload=pdf)
    patient_account.refresh_from_db()
    assert patient_account.photo_path == ""


def test_license_document_lands_in_role_folder(pharmacy_account, patient_account):
    pdf = SimpleUploadedFile("license.pdf", b"%PDF-1.4", content_type="application/pdf")
    account = AccountService.upload_license_document(actor=pharmacy_account.user, upload=pdf)

    assert account.pharmacy_profile.license_document_path.startswith(
        f"pharmacies/{pharmacy_account.user_id}/documents/"
    )

    with pytest.raises(RoleNotPermitted):
        AccountService.upload_license_document(actor=patient_account.user, upload=_png())


def test_upload_endpoints(api_client_for, doctor_user):
    client = api_client_for(doctor_user)

    photo = client.post("/api/v1/me/photo/", {"file": _png()}, format="multipart")
    assert photo.status_code == 200
    assert photo.data["photo_path"].startswith(f"users/{doctor_user.id}/profile/")

    doc = client.post("/api/v1/me/license-document/", {"file": _png("license.png")}, format="multipart")
    assert doc.status_code == 200
    assert doc.data["profile"]["license_document_path"].startswith(f"doctors/{doctor_user.id}/documents/")


def test_photo_path_cannot_be_set_through_profile_edits(api_client_for, doctor_account, patient_account):
    doctor = AccountService.upload_photo(actor=doctor_account.user, upload=_png("doc.png"))
    doctor_path = doctor.photo_path

    client = api_client_for(patient_account.user)
    res = client.patch("/api/v1/me/", {"photo_path": doctor_path}, format="json")
    assert res.status_code == 200
    assert res.data["photo_path"] == ""

    res = client.patch("/api/v1/me/", {"profile": {"photo_path": doctor_path}}, format="json")
    assert res.status_code == 200
    assert res.data["photo_path"] == ""

    assert client.post("/api/v1/me/photo/", {"file": _png()}, format="multipart").status_code == 200
    assert default_storage.exists(doctor_path)


def test_photo_upload_only_removes_own_previous_photo(doctor_account, patient_account):
    doctor_path = AccountService.upload_photo(actor=doctor_account.user, upload=_png("doc.png")).photo_path

    patient_account.photo_path = doctor_path
    patient_account.save(update_fields=["photo_path"])

    AccountService.upload_photo(actor=patient_account.user, upload=_png())
    assert default_storage.exists(doctor_path)


def test_license_document_path_is_written_only_by_upload(doctor_account):
    AccountService.update_profile(
        actor=doctor_account.user,
        fields={"license_document_path": "pharmacies/1/documents/other.pdf", "hospital": "City Clinic"},
    )
    profile = DoctorProfile.objects.get(account=doctor_account)
    assert profile.hospital == "City Clinic"
    assert profile.license_document_path == ""

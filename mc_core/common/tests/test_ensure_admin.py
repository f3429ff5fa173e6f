import pytest
from django.core.management import CommandError, call_command

from mc_core.accounts.models import Account, AccountRole

pytestmark = pytest.mark.django_db


def test_creates_admin_once():
    call_command("ensure_admin", "Root@Example.com", "--password", "Secret#123", "--name", "Root")
    call_command("ensure_admin", "root@example.com")

    account = Account.objects.get(user__username="root@example.com")
    assert account.role == AccountRole.ADMIN
    assert account.display_name == "Root"
    assert account.user.is_superuser
    assert account.user.check_password("Secret#123")


def test_password_required_for_new_admin():
    with pytest.raises(CommandError):
        call_command("ensure_admin", "new@example.com")


def test_refuses_other_roles(patient_account):
    with pytest.raises(CommandError):
        call_command("ensure_admin", patient_account.email)

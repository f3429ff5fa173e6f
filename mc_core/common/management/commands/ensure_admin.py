# mc_core/common/management/commands/ensure_admin.py

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from mc_core.accounts.models import Account, AccountRole


class Command(BaseCommand):
    help = "Ensure an admin account exists for the given email (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("email")
        parser.add_argument("--password", default=None)
        parser.add_argument("--name", default="Administrator")

    def handle(self, *args, **options):
        email = options["email"].strip().lower()
        User = get_user_model()

        user, user_created = User.objects.get_or_create(
            username=email,
            defaults={"email": email, "is_staff": True, "is_superuser": True},
        )
        if user_created:
            if not options["password"]:
                raise CommandError("--password is required when creating a new admin.")
            user.set_password(options["password"])
            user.save(update_fields=["password"])

        account, account_created = Account.objects.get_or_create(
            user=user,
            defaults={"role": AccountRole.ADMIN, "display_name": options["name"], "verified": True},
        )
        if account.role != AccountRole.ADMIN:
            raise CommandError(f"{email} already has a {account.role} account.")

        self.stdout.write(
            self.style.SUCCESS(f"Admin ensured: {email} (user created: {user_created}, account created: {account_created})")
        )

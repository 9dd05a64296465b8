"""
Bootstrap an admin account directly in the database.

    python scripts/create_admin.py --email ops@example.com --first-name Ops --last-name Team --password 'S3cure!pass'

With ``--password`` the account is created active and ready to log in.
Without it the account is created inactive and the onboarding link is printed.
"""
import argparse
import sys

from forms_admin.config import get_settings
from forms_admin.database import Base, SessionLocal, engine
from forms_admin.models.admin_user import ROLE_ADMINISTRATOR, VALID_ROLES
from forms_admin.repositories import AdminUserRepository
from forms_admin.services.user_management import UserManagementService
from forms_admin.utils.errors import ConflictError
from forms_admin.utils.passwords import hash_password, password_policy


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Create a Forms Admin account")
    parser.add_argument("--email", required=True)
    parser.add_argument("--first-name", required=True)
    parser.add_argument("--last-name", required=True)
    parser.add_argument("--role", choices=VALID_ROLES, default=ROLE_ADMINISTRATOR)
    parser.add_argument("--password", help="set the password now instead of printing an onboarding link")
    parser.add_argument("--create-tables", action="store_true", help="create missing tables first (development only)")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    settings = get_settings()

    if args.password:
        problems = password_policy.violations(args.password)
        if problems:
            print("Password rejected:")
            for problem in problems:
                print(f"  - {problem}")
            return 1

    if args.create_tables:
        Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        try:
            created = UserManagementService(db, settings).create_user(
                args.first_name, args.last_name, args.email, args.role
            )
        except ConflictError as exc:
            print(f"❌ {exc.message}: {args.email}")
            return 1

        user = created.user
        if args.password:
            AdminUserRepository(db).update(
                user.id,
                password_hash=hash_password(args.password, settings.BCRYPT_ROUNDS),
                is_active=True,
                onboarding_token=None,
                onboarding_token_expiry=None,
            )
            print(f"✓ Created active {args.role} {user.email} (id={user.id})")
        else:
            print(f"✓ Created {args.role} {user.email} (id={user.id}), pending onboarding")
            print(f"  Onboarding link (valid {settings.ONBOARDING_TOKEN_TTL_HOURS}h): {created.onboarding_url}")
    finally:
        db.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())

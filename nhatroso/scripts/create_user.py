"""
Create a user (e.g. the first owner or a staff account). Run from project root:
  python -m nhatroso.scripts.create_user EMAIL PASSWORD "FULL NAME" [--phone PHONE] [--role owner|admin|staff]
Example:
  python -m nhatroso.scripts.create_user owner@example.com your-secure-password "Nguyen Van A" --role owner
"""
import argparse
import logging
import sys

from pydantic import EmailStr, TypeAdapter, ValidationError

from nhatroso.core.config import get_settings
from nhatroso.core.database import SessionLocal
from nhatroso.models import UserRole
from nhatroso.schemas.auth import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from nhatroso.services.users import EmailAlreadyExistsError, create_user

_email_adapter = TypeAdapter(EmailStr)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Nhatroso user account.")
    parser.add_argument("email", help="Login email")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("full_name", help="Display name")
    parser.add_argument("--phone", default=None, help="Contact phone")
    parser.add_argument(
        "--role",
        default=UserRole.OWNER.value,
        choices=[r.value for r in UserRole],
    )
    args = parser.parse_args(argv)

    email = args.email.strip()
    try:
        _email_adapter.validate_python(email)
    except ValidationError:
        print(f"Invalid email: {email!r}", file=sys.stderr)
        return 1
    if len(email) > 255:
        print("Email is too long.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(
            f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.",
            file=sys.stderr,
        )
        return 1
    if not args.full_name.strip():
        print("Full name must not be blank.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        user = create_user(
            db,
            email=email,
            password=args.password,
            full_name=args.full_name,
            phone=args.phone,
            role=args.role,
            settings=get_settings(),
        )
        print(f"Created user '{user.email}' (id={user.id}) with role '{user.role}'.")
        return 0
    except EmailAlreadyExistsError as e:
        print(f"User '{e.email}' already exists.", file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    sys.exit(main())

"""
Create a user from the command line (e.g. an extra admin). Run from project root:
  python -m app.scripts.create_user EMAIL PASSWORD FIRST_NAME LAST_NAME [user|admin]
Example:
  python -m app.scripts.create_user ops@example.com your-secure-password Ops Team admin
Roles must already exist; run python -m app.scripts.seed first.
"""
import argparse
import sys

from pydantic import ValidationError as SchemaValidationError

from app.core.database import SessionLocal
from app.core.errors import AccessControlError
from app.schemas.users import UserCreateRequest
from app.services.users import UserService


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create an EDMS user without the HTTP API.")
    parser.add_argument("email", help="Email address (unique)")
    parser.add_argument("password", help="Password (8-128 chars)")
    parser.add_argument("first_name")
    parser.add_argument("last_name")
    parser.add_argument("user_type", nargs="?", default="user", choices=["user", "admin"])
    args = parser.parse_args(argv)

    try:
        request = UserCreateRequest(
            email=args.email.strip(),
            password=args.password,
            first_name=args.first_name,
            last_name=args.last_name,
            user_type=args.user_type,
        )
    except SchemaValidationError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        user = UserService(db).create_user(request)
        print(f"Created user '{user.email}' with role '{user.primary_role.name}'.")
        return 0
    except AccessControlError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())

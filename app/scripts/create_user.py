"""
Create an account outside the HTTP API (e.g. the first admin). Run from project root:
  python -m app.scripts.create_user USERNAME PASSWORD [role]
Example:
  python -m app.scripts.create_user alice 'Secret123!' admin
"""
import argparse
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.schemas.auth import Role
from app.services.accounts import sign_up
from app.services.errors import InputValidationError


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Vetted account.")
    parser.add_argument("username", help="Username (1-255 chars)")
    parser.add_argument("password", help="Password (1-128 chars)")
    parser.add_argument(
        "role",
        nargs="?",
        default=Role.USER.value,
        choices=[r.value for r in Role],
    )
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        user = sign_up(
            db,
            username=args.username,
            password=args.password,
            role=args.role,
            rounds=get_settings().BCRYPT_ROUNDS,
        )
    except InputValidationError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created user '{user.username}' with role '{user.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
Create a user (e.g. an extra librarian). Run from project root:
  python -m library_api.scripts.create_user NAME EMAIL PASSWORD [role]
Example:
  python -m library_api.scripts.create_user "Ada" ada@example.com your-secure-password librarian
"""
import argparse
import sys

from dotenv import load_dotenv
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError

from library_api.core.config import get_settings
from library_api.core.database import DatabaseConnectionError, connect, get_database
from library_api.core.security import NAME_MAX_LEN, PASSWORD_MAX_LEN, PASSWORD_MIN_LEN, hash_password
from library_api.models.user import USERS_COLLECTION, UserRole, new_user_document, normalize_email


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a library user account.")
    parser.add_argument("name", help=f"Display name (1-{NAME_MAX_LEN} chars)")
    parser.add_argument("email", help="Login email")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument(
        "role",
        nargs="?",
        default=UserRole.MEMBER.value,
        choices=[r.value for r in UserRole],
    )
    args = parser.parse_args(argv)

    name = args.name.strip()
    email = normalize_email(args.email)
    if not name or len(name) > NAME_MAX_LEN:
        print("Invalid name length.", file=sys.stderr)
        return 1
    if "@" not in email:
        print("Invalid email address.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) and len(args.password.encode("utf-8")) <= PASSWORD_MAX_LEN):
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1

    load_dotenv()
    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1
    try:
        client = connect(settings)
    except DatabaseConnectionError as e:
        print(e.message, file=sys.stderr)
        return 1

    try:
        users = get_database(client, settings)[USERS_COLLECTION]
        if users.find_one({"email": email}) is not None:
            print(f"User '{email}' already exists.", file=sys.stderr)
            return 1
        try:
            users.insert_one(
                new_user_document(
                    name=name,
                    email=email,
                    password_hash=hash_password(args.password),
                    role=UserRole(args.role),
                )
            )
        except DuplicateKeyError:
            print(f"User '{email}' already exists.", file=sys.stderr)
            return 1
        print(f"Created user '{email}' with role '{args.role}'.")
        return 0
    finally:
        client.close()


if __name__ == "__main__":
    sys.exit(main())

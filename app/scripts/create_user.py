"""
Seed a user. Run from project root:
  python -m app.scripts.create_user USERNAME "Full Name" --branch-id 1 --role-id 1
Without --password or --generate the user has no password yet and sets one on first login.
Example:
  python -m app.scripts.create_user jperez "Juan Perez" --branch-id 1 --role-id 2 --generate
"""
import argparse
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.logging_config import configure_logging
from app.core.security import (
    BCRYPT_MAX_BYTES,
    check_password_strength,
    generate_random_password,
    hash_password,
)
from app.models import Branch, Role, User

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create an Escolar user (no registration UI).")
    parser.add_argument("username", help="Username (1-80 chars, case-sensitive)")
    parser.add_argument("name", help="Display name (1-150 chars)")
    parser.add_argument("--branch-id", type=int, required=True, help="Existing branch id")
    parser.add_argument("--role-id", type=int, required=True, help="Existing role id")
    secret = parser.add_mutually_exclusive_group()
    secret.add_argument("--password", help="Initial password (must pass the strength rules)")
    secret.add_argument(
        "--generate", action="store_true", help="Generate and print a random strong password"
    )
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    username = args.username.strip()
    if not username or len(username) > 80:
        print("Invalid username length.", file=sys.stderr)
        return 1
    name = args.name.strip()
    if not name or len(name) > 150:
        print("Invalid name length.", file=sys.stderr)
        return 1

    password = args.password
    if args.generate:
        password = generate_random_password()
    if password is not None:
        if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            print(f"Password must be at most {BCRYPT_MAX_BYTES} bytes.", file=sys.stderr)
            return 1
        strength = check_password_strength(password)
        if not strength.valid:
            print(f"Password rejected: {strength.message}", file=sys.stderr)
            return 1

    db = SessionLocal()
    try:
        if db.get(Branch, args.branch_id) is None:
            print(f"Branch {args.branch_id} does not exist.", file=sys.stderr)
            return 1
        if db.get(Role, args.role_id) is None:
            print(f"Role {args.role_id} does not exist.", file=sys.stderr)
            return 1
        existing = db.query(User).filter(User.username == username).first()
        if existing:
            print(f"User '{username}' already exists.", file=sys.stderr)
            return 1
        user = User(
            username=username,
            name=name,
            branch_id=args.branch_id,
            role_id=args.role_id,
            password_hash=hash_password(password, settings.BCRYPT_ROUNDS) if password else None,
        )
        db.add(user)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Could not create user '%s'", username)
        return 1
    finally:
        db.close()

    if args.generate:
        print(f"Created user '{username}' with password: {password}")
    elif password is None:
        print(f"Created user '{username}' without a password; it is set on first login.")
    else:
        print(f"Created user '{username}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())

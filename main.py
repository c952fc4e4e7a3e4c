#!/usr/bin/env python3
"""
AccessGate -- admin bootstrap CLI.

No HTTP operation grants the admin role, so the first admin (and any later
ones) is created here, directly against the account store.

Usage:
  python main.py create-admin --email admin@example.com --full-name "Site Admin"
  ADMIN_PASSWORD='Secret123' python main.py create-admin --email admin@example.com --full-name Admin

Password source, first match wins: --password, the ADMIN_PASSWORD environment
variable, an interactive prompt. It must satisfy the same rules as signup.

Environment variables:
  DATABASE_URL    SQLAlchemy URL of the account database (see core/config.py)
  BCRYPT_ROUNDS   bcrypt cost factor for the new hash
"""

import argparse
import getpass
import os
import sys
from typing import Optional

from auth.errors import DuplicateAccountError, ValidationError
from auth.models import Account, Role, normalize_email
from auth.passwords import CredentialHasher
from auth.store import AccountStore
from auth.validation import email_errors, full_name_errors, password_errors, raise_if_any
from core.config import get_settings


def create_admin(store: AccountStore, hasher: CredentialHasher, email: str, password: str, full_name: str) -> Account:
    """Validate and insert an active admin account.

    Raises ValidationError on bad input and DuplicateAccountError if the email
    is already registered (any role).
    """
    email = normalize_email(email)
    raise_if_any(email_errors(email) + full_name_errors(full_name) + password_errors(password))
    return store.create_account(
        email=email,
        credential_hash=hasher.hash(password),
        full_name=full_name,
        role=Role.admin,
    )


def _resolve_password(cli_value: Optional[str]) -> str:
    if cli_value:
        return cli_value
    env_value = os.environ.get("ADMIN_PASSWORD")
    if env_value:
        return env_value
    first = getpass.getpass("Admin password: ")
    second = getpass.getpass("Repeat password: ")
    if first != second:
        print("  [!] Passwords do not match.", file=sys.stderr)
        sys.exit(2)
    return first


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="accessgate",
        description="AccessGate account administration.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py create-admin --email admin@example.com --full-name "Site Admin"
  ADMIN_PASSWORD=Secret123 python main.py create-admin --email ops@example.com --full-name Ops
        """,
    )
    sub = parser.add_subparsers(dest="command")

    create = sub.add_parser("create-admin", help="Create an active admin account")
    create.add_argument("--email", required=True, help="Login email for the admin")
    create.add_argument("--full-name", required=True, help="Display name (2-100 characters)")
    create.add_argument(
        "--password",
        default=None,
        help="Password (falls back to ADMIN_PASSWORD, then an interactive prompt)",
    )
    args = parser.parse_args(argv)

    if args.command != "create-admin":
        parser.print_help()
        return 1

    settings = get_settings()
    store = AccountStore(settings.database_url)
    try:
        account = create_admin(
            store,
            CredentialHasher(rounds=settings.bcrypt_rounds),
            email=args.email,
            password=_resolve_password(args.password),
            full_name=args.full_name,
        )
    except DuplicateAccountError:
        print(f"  [!] An account with email {normalize_email(args.email)} already exists.", file=sys.stderr)
        return 1
    except ValidationError as exc:
        for fe in exc.field_errors:
            print(f"  [!] {fe.field}: {fe.message}", file=sys.stderr)
        return 2
    finally:
        store.close()

    print(f"Admin created: {account.email} (id: {account.id})")
    return 0


if __name__ == "__main__":
    sys.exit(main())

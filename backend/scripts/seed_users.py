#!/usr/bin/env python3
"""Seed the user directory of a local database.

Usage:
    cd backend
    python -m scripts.seed_users
    python -m scripts.seed_users --user "Ana Petrovic <ana@example.com>"
"""

from __future__ import annotations

import argparse
import re
import sys

from sqlmodel import Session

from projecthub.db.database import create_db_and_tables, engine
from projecthub.services.directory import seed_users

DEMO_USERS: list[tuple[str, str]] = [
    ("Ana Petrovic", "ana@example.com"),
    ("Marko Jovanovic", "marko@example.com"),
    ("Jelena Nikolic", "jelena@example.com"),
    ("Stefan Ilic", "stefan@example.com"),
]

_USER_PATTERN = re.compile(r"^\s*(?P<name>[^<]+?)\s*<(?P<email>[^>]+)>\s*$")


def _parse_user(value: str) -> tuple[str, str]:
    match = _USER_PATTERN.match(value)
    if match is None:
        raise argparse.ArgumentTypeError(f"Expected 'Name <email>', got: {value!r}")
    return match.group("name"), match.group("email")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Seed ProjectHub users")
    parser.add_argument(
        "--user",
        action="append",
        type=_parse_user,
        help="User as 'Name <email>' (repeatable). Defaults to a demo team.",
    )
    args = parser.parse_args(argv)

    create_db_and_tables()
    with Session(engine) as session:
        result = seed_users(session, args.user or DEMO_USERS)

    for user in result.created:
        print(f"  CREATED: {user.name} <{user.email}>  [id={user.id}]")
    for email in result.skipped:
        print(f"  SKIP (already exists): {email}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

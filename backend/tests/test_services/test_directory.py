"""Tests for user directory seeding."""

import argparse

import pytest

from projecthub.services.directory import seed_users
from scripts.seed_users import _parse_user


def test_seed_users_skips_existing_emails(session, users):
    result = seed_users(session, [("Ana Again", "ANA@example.com "), ("Nina Savic", "nina@example.com")])
    assert result.skipped == ["ana@example.com"]
    assert [u.email for u in result.created] == ["nina@example.com"]
    assert result.created[0].id == 5


def test_seed_script_parses_name_and_email():
    assert _parse_user("Nina Savic <nina@example.com>") == ("Nina Savic", "nina@example.com")
    with pytest.raises(argparse.ArgumentTypeError):
        _parse_user("nina@example.com")

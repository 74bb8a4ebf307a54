"""Tests for the operator CLI."""

from __future__ import annotations

import pytest

import db
import manage


def test_create_user_then_grant_credits(capsys: pytest.CaptureFixture[str]) -> None:
    manage.main(["create-user", "--email", "cli@example.com", "--name", "Cli"])
    out = capsys.readouterr().out
    assert "email=cli@example.com" in out
    api_key = out.strip().splitlines()[-1].split("=", 1)[1]
    assert db.verify_api_key(api_key)["email"] == "cli@example.com"

    manage.main(["grant-credits", "--email", "cli@example.com", "--amount", "250"])
    assert "credits=250" in capsys.readouterr().out

    tx = db.list_credit_transactions(db.get_user_by_email("cli@example.com")["user_id"])[0]
    assert tx["type"] == "admin_grant"
    assert tx["description"] == "Manual credit grant"


def test_set_role_and_unknown_user(capsys: pytest.CaptureFixture[str]) -> None:
    manage.main(["create-user", "--email", "boss@example.com"])
    manage.main(["set-role", "--email", "boss@example.com", "--role", "admin"])

    assert db.get_user_by_email("boss@example.com")["role"] == "admin"

    with pytest.raises(SystemExit):
        manage.main(["grant-credits", "--email", "ghost@example.com", "--amount", "1"])


def test_expire_credits(capsys: pytest.CaptureFixture[str]) -> None:
    manage.main(["expire-credits"])

    assert capsys.readouterr().out.strip() == "expired=0"


@pytest.mark.parametrize("amount", ["0", "-5"])
def test_grant_credits_rejects_non_positive_amount(capsys: pytest.CaptureFixture[str], amount: str) -> None:
    manage.main(["create-user", "--email", "zero@example.com"])
    capsys.readouterr()

    with pytest.raises(SystemExit) as excinfo:
        manage.main(["grant-credits", "--email", "zero@example.com", "--amount", amount])

    assert excinfo.value.code == 1
    assert "must be positive" in capsys.readouterr().err
    assert db.get_user_by_email("zero@example.com")["credits"] == 0

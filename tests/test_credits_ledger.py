"""Tests for the credits ledger: grants, spending order and expiry."""

from __future__ import annotations

import sqlite3
import time
from contextlib import closing

import pytest

import db
from modules.credit.service import check_credits, register_user
from modules.credit.settings import TYPE_EXPIRE, TYPE_REFUND, TYPE_REGISTER_GIFT, TYPE_USAGE


def _transactions_by_type(user_id: int) -> dict:
    result: dict = {}
    for tx in db.list_credit_transactions(user_id, limit=100):
        result.setdefault(tx["type"], []).append(tx)
    return result


def _ledger_sum(user_id: int) -> int:
    return sum(tx["amount"] for tx in db.list_credit_transactions(user_id, limit=100))


def _make_overdue(transaction_id: int) -> None:
    with closing(sqlite3.connect(db.DB_PATH)) as con:
        con.execute(
            "UPDATE credit_transactions SET expires_at=? WHERE id=?",
            (int(time.time()) - 10, transaction_id),
        )
        con.commit()


def test_consume_credits_debits_balance(make_user) -> None:
    user, _ = make_user(credits=30)

    assert db.consume_credits(user["user_id"], 10, description="clip") is not None
    assert db.get_credit_balance(user["user_id"]) == 20

    usage = _transactions_by_type(user["user_id"])[TYPE_USAGE]
    assert usage[0]["amount"] == -10
    assert usage[0]["description"] == "clip"


def test_consume_credits_refuses_overdraft(make_user) -> None:
    user, _ = make_user(credits=5)

    assert db.consume_credits(user["user_id"], 10) is None
    assert db.get_credit_balance(user["user_id"]) == 5
    assert TYPE_USAGE not in _transactions_by_type(user["user_id"])


def test_add_credits_rejects_bad_input(make_user) -> None:
    user, _ = make_user()

    with pytest.raises(ValueError):
        db.add_credits(user["user_id"], 0, "admin_grant")
    with pytest.raises(ValueError):
        db.consume_credits(user["user_id"], -1)
    with pytest.raises(ValueError):
        db.add_credits(9999, 10, "admin_grant")


def test_spending_draws_soonest_expiring_grant_first(make_user) -> None:
    user, _ = make_user()
    user_id = user["user_id"]
    permanent = db.add_credits(user_id, 100, "purchase")
    expiring = db.add_credits(user_id, 40, "subscription_renewal", expire_days=30)

    assert db.consume_credits(user_id, 50)

    remaining = {tx["id"]: tx["remaining_amount"] for tx in db.list_credit_transactions(user_id, limit=100)}
    assert remaining[expiring] == 0
    assert remaining[permanent] == 90
    assert db.get_credit_balance(user_id) == 90


def test_expire_credits_forfeits_only_unspent_overdue_grants(make_user) -> None:
    user, _ = make_user()
    user_id = user["user_id"]
    db.add_credits(user_id, 100, "purchase")
    expiring = db.add_credits(user_id, 40, "subscription_renewal", expire_days=30)
    db.consume_credits(user_id, 15)

    assert db.expire_credits() == 0

    later = int(time.time()) + 31 * 86_400
    assert db.expire_credits(now=later) == 1
    assert db.get_credit_balance(user_id) == 100

    expired = _transactions_by_type(user_id)[TYPE_EXPIRE]
    assert expired[0]["amount"] == -25
    assert str(expiring) in expired[0]["description"]

    # Running the job again is a no-op.
    assert db.expire_credits(now=later) == 0


def test_overdue_grant_cannot_fund_a_debit(make_user) -> None:
    user, _ = make_user()
    user_id = user["user_id"]
    _make_overdue(db.add_credits(user_id, 800, "subscription_renewal", expire_days=30))

    assert db.consume_credits(user_id, 800) is None
    assert db.get_credit_balance(user_id) == 0
    assert _transactions_by_type(user_id)[TYPE_EXPIRE][0]["amount"] == -800
    assert TYPE_USAGE not in _transactions_by_type(user_id)

    assert db.expire_credits() == 0
    db.add_credits(user_id, 1000, "purchase")
    assert db.get_credit_balance(user_id) == 1000
    assert _ledger_sum(user_id) == 1000


def test_overdue_grant_is_skipped_in_favour_of_live_credits(make_user) -> None:
    user, _ = make_user()
    user_id = user["user_id"]
    _make_overdue(db.add_credits(user_id, 30, "register_gift", expire_days=7))
    permanent = db.add_credits(user_id, 50, "purchase")

    assert db.consume_credits(user_id, 40) is not None

    remaining = {tx["id"]: tx["remaining_amount"] for tx in db.list_credit_transactions(user_id, limit=100)}
    assert remaining[permanent] == 10
    assert db.get_credit_balance(user_id) == 10
    assert _ledger_sum(user_id) == 10


def test_refund_returns_credits_to_their_grant(make_user) -> None:
    user, _ = make_user()
    user_id = user["user_id"]
    grant = db.add_credits(user_id, 10, "subscription_renewal", expire_days=30)
    usage_id = db.consume_credits(user_id, 10)

    assert db.refund_credits(user_id, usage_id, description="failed clip") == 10
    assert db.get_credit_balance(user_id) == 10
    remaining = {tx["id"]: tx["remaining_amount"] for tx in db.list_credit_transactions(user_id, limit=100)}
    assert remaining[grant] == 10
    assert _transactions_by_type(user_id)[TYPE_REFUND][0]["amount"] == 10

    # A second refund of the same debit does nothing.
    assert db.refund_credits(user_id, usage_id) == 0
    assert db.get_credit_balance(user_id) == 10

    later = int(time.time()) + 31 * 86_400
    assert db.expire_credits(now=later) == 1
    assert db.get_credit_balance(user_id) == 0
    assert _ledger_sum(user_id) == 0


def test_refund_onto_overdue_grant_is_forfeited(make_user) -> None:
    user, _ = make_user()
    user_id = user["user_id"]
    grant = db.add_credits(user_id, 10, "subscription_renewal", expire_days=30)
    usage_id = db.consume_credits(user_id, 10)
    _make_overdue(grant)

    assert db.refund_credits(user_id, usage_id) == 10

    assert db.get_credit_balance(user_id) == 0
    assert _transactions_by_type(user_id)[TYPE_EXPIRE][0]["amount"] == -10
    assert _ledger_sum(user_id) == 0


def test_refund_ignores_other_users_debits(make_user) -> None:
    owner, _ = make_user(credits=20)
    other, _ = make_user()
    usage_id = db.consume_credits(owner["user_id"], 10)

    assert db.refund_credits(other["user_id"], usage_id) == 0
    assert db.get_credit_balance(other["user_id"]) == 0
    assert db.get_credit_balance(owner["user_id"]) == 10


def test_register_user_grants_gift() -> None:
    user = register_user("New@Example.com", "New", gift_credits=50, gift_expire_days=7)

    assert user["email"] == "new@example.com"
    assert user["credits"] == 50
    gift = _transactions_by_type(user["user_id"])[TYPE_REGISTER_GIFT][0]
    assert gift["expires_at"] is not None


def test_register_user_without_gift() -> None:
    user = register_user("plain@example.com", gift_credits=0)

    assert user["credits"] == 0
    assert db.list_credit_transactions(user["user_id"]) == []


def test_register_user_rejects_duplicates() -> None:
    register_user("dup@example.com", gift_credits=0)

    with pytest.raises(ValueError):
        register_user("dup@example.com", gift_credits=0)


def test_check_credits(make_user) -> None:
    user, _ = make_user(credits=20)

    result = check_credits(user["user_id"], duration=10, quality="1080p", generate_audio=True)

    assert result == {"credits": 20, "required": 25, "sufficient": False}
    assert check_credits(user["user_id"], duration=5, quality="720p", generate_audio=False)["sufficient"]

"""Operator commands for the SeedanceAI database.

Examples::

    python manage.py create-user --email ana@example.com --name Ana
    python manage.py grant-credits --email ana@example.com --amount 500
    python manage.py expire-credits
    python manage.py wait-task task_123

``wait-task`` blocks on an Evolink task until it finishes, which is handy
when a generation looks stuck in the studio.
"""
from __future__ import annotations

import argparse
import logging
import sys

import db
from config import LOG_LEVEL
from modules.credit.service import register_user
from modules.credit.settings import TYPE_ADMIN_GRANT
from modules.evolink.service import EvolinkError, EvolinkService
from modules.studio.settings import POLL_INTERVAL, POLL_TIMEOUT


def _user_or_exit(email: str) -> dict:
    user = db.get_user_by_email(email)
    if not user:
        print(f"No user with email {email}", file=sys.stderr)
        raise SystemExit(1)
    return user


def cmd_create_user(args: argparse.Namespace) -> None:
    try:
        user = register_user(args.email, args.name)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        raise SystemExit(1)
    api_key = db.ensure_user_api_key(user["user_id"])
    print(f"user_id={user['user_id']} email={user['email']} credits={user['credits']}")
    print(f"api_key={api_key}")


def cmd_grant_credits(args: argparse.Namespace) -> None:
    user = _user_or_exit(args.email)
    try:
        db.add_credits(
            user["user_id"],
            args.amount,
            TYPE_ADMIN_GRANT,
            description=args.description,
            expire_days=args.expire_days,
        )
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        raise SystemExit(1)
    print(f"user_id={user['user_id']} credits={db.get_credit_balance(user['user_id'])}")


def cmd_set_role(args: argparse.Namespace) -> None:
    user = _user_or_exit(args.email)
    db.set_user_role(user["user_id"], args.role)
    print(f"user_id={user['user_id']} role={args.role}")


def cmd_issue_key(args: argparse.Namespace) -> None:
    user = _user_or_exit(args.email)
    if args.regenerate:
        api_key = db.regenerate_user_api_key(user["user_id"])
    else:
        api_key = db.ensure_user_api_key(user["user_id"])
    print(f"api_key={api_key}")


def cmd_expire_credits(args: argparse.Namespace) -> None:
    print(f"expired={db.expire_credits()}")


def cmd_wait_task(args: argparse.Namespace) -> None:
    try:
        result = EvolinkService().wait_for_task(
            args.task_id,
            poll_interval=args.interval,
            timeout=args.timeout,
        )
    except EvolinkError as exc:
        print(f"Task failed: {exc}", file=sys.stderr)
        raise SystemExit(1)
    print(f"status={result['status']} video_url={result.get('video_url') or ''}")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage SeedanceAI users and credits.")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("create-user", help="Create a user and print their API key.")
    p.add_argument("--email", required=True)
    p.add_argument("--name")
    p.set_defaults(func=cmd_create_user)

    p = sub.add_parser("grant-credits", help="Add credits to a user.")
    p.add_argument("--email", required=True)
    p.add_argument("--amount", type=int, required=True)
    p.add_argument("--description", default="Manual credit grant")
    p.add_argument("--expire-days", type=int, default=None)
    p.set_defaults(func=cmd_grant_credits)

    p = sub.add_parser("set-role", help="Change a user's role.")
    p.add_argument("--email", required=True)
    p.add_argument("--role", choices=["user", "admin"], required=True)
    p.set_defaults(func=cmd_set_role)

    p = sub.add_parser("issue-key", help="Print (or regenerate) a user's API key.")
    p.add_argument("--email", required=True)
    p.add_argument("--regenerate", action="store_true")
    p.set_defaults(func=cmd_issue_key)

    p = sub.add_parser("expire-credits", help="Expire overdue credit grants.")
    p.set_defaults(func=cmd_expire_credits)

    p = sub.add_parser("wait-task", help="Poll an Evolink task until it finishes.")
    p.add_argument("task_id")
    p.add_argument("--interval", type=float, default=POLL_INTERVAL)
    p.add_argument("--timeout", type=float, default=POLL_TIMEOUT)
    p.set_defaults(func=cmd_wait_task)

    return parser.parse_args(argv)


def main(argv=None) -> None:
    logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO))
    args = parse_args(argv)
    db.init_db()
    args.func(args)


if __name__ == "__main__":
    main()

import base64
import hashlib
import hmac
import logging
import os
import secrets
import sqlite3
import time
from contextlib import closing

from cryptography.fernet import Fernet, InvalidToken

from config import API_KEY_ENCRYPTION_SECRET, DB_DIR

logger = logging.getLogger(__name__)

DB_PATH = os.path.join(DB_DIR, "app.db")

_API_KEY_HEADER_PREFIX = "SD"
_API_KEY_VERSION = "1"
_FERNET_KEY_CACHE: Fernet | None = None

_USER_COLUMNS = ("user_id", "email", "name", "role", "credits", "created_at", "last_seen")
_SECONDS_PER_DAY = 86_400


def _connect() -> sqlite3.Connection:
    con = sqlite3.connect(DB_PATH, timeout=10)
    con.row_factory = sqlite3.Row
    return con


def _secret_path() -> str:
    return os.path.join(os.path.dirname(DB_PATH) or ".", "api_key_secret.key")


def _load_or_create_encryption_secret() -> str:
    """Return a stable encryption secret stored alongside the database."""

    path = _secret_path()
    try:
        with open(path, "r", encoding="utf-8") as fh:
            secret = fh.read().strip()
            if secret:
                return secret
    except FileNotFoundError:
        pass

    secret = secrets.token_urlsafe(64)
    tmp_path = f"{path}.tmp"
    with open(tmp_path, "w", encoding="utf-8") as fh:
        fh.write(secret)
    os.replace(tmp_path, path)
    try:
        os.chmod(path, 0o600)
    except OSError:
        # Permission errors are expected on some platforms (e.g. Windows).
        pass
    return secret


def _get_api_key_cipher() -> Fernet:
    global _FERNET_KEY_CACHE
    if _FERNET_KEY_CACHE is not None:
        return _FERNET_KEY_CACHE
    secret = (API_KEY_ENCRYPTION_SECRET or "").strip()
    if not secret:
        secret = _load_or_create_encryption_secret()
    digest = hashlib.sha256(secret.encode("utf-8")).digest()
    key = base64.urlsafe_b64encode(digest)
    _FERNET_KEY_CACHE = Fernet(key)
    return _FERNET_KEY_CACHE


def _encrypt_api_key(value: str) -> str:
    cipher = _get_api_key_cipher()
    token = cipher.encrypt(value.encode("utf-8"))
    return token.decode("utf-8")


def _decrypt_api_key(token: str) -> str:
    cipher = _get_api_key_cipher()
    try:
        value = cipher.decrypt(token.encode("utf-8"))
    except InvalidToken as exc:
        raise RuntimeError("Stored API key could not be decrypted") from exc
    return value.decode("utf-8")


def _generate_api_key_material() -> tuple[str, str, str]:
    key_id = secrets.token_hex(8)
    secret = secrets.token_urlsafe(32)
    api_key = f"{_API_KEY_HEADER_PREFIX}{_API_KEY_VERSION}-{key_id}.{secret}"
    return key_id, secret, api_key


def _hash_secret(secret: str, salt: bytes) -> str:
    digest = hashlib.pbkdf2_hmac(
        "sha256",
        secret.encode("utf-8"),
        salt,
        200_000,
    )
    return base64.urlsafe_b64encode(digest).decode("utf-8")


# -------------------
# Schema
# -------------------
def init_db():
    os.makedirs(os.path.dirname(DB_PATH) or ".", exist_ok=True)
    with closing(_connect()) as con:
        cur = con.cursor()
        cur.execute("""CREATE TABLE IF NOT EXISTS users(
            user_id INTEGER PRIMARY KEY AUTOINCREMENT,
            email TEXT NOT NULL UNIQUE,
            name TEXT,
            role TEXT NOT NULL DEFAULT 'user',
            credits INTEGER NOT NULL DEFAULT 0,
            created_at INTEGER NOT NULL,
            last_seen INTEGER,
            api_key_id TEXT UNIQUE,
            api_key_secret_hash TEXT,
            api_key_salt TEXT,
            api_key_encrypted TEXT,
            api_key_created_at INTEGER,
            api_key_last_used_at INTEGER,
            api_key_revoked_at INTEGER
        )""")
        cur.execute("""CREATE TABLE IF NOT EXISTS credit_transactions(
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL,
            type TEXT NOT NULL,
            amount INTEGER NOT NULL,
            remaining_amount INTEGER NOT NULL DEFAULT 0,
            description TEXT,
            payment_id TEXT,
            expires_at INTEGER,
            created_at INTEGER NOT NULL
        )""")
        cur.execute("""CREATE INDEX IF NOT EXISTS idx_credit_transactions_user
                       ON credit_transactions(user_id, id)""")
        cur.execute("""CREATE TABLE IF NOT EXISTS credit_draws(
            usage_id INTEGER NOT NULL,
            grant_id INTEGER NOT NULL,
            amount INTEGER NOT NULL
        )""")
        cur.execute("""CREATE INDEX IF NOT EXISTS idx_credit_draws_usage
                       ON credit_draws(usage_id)""")
        cur.execute("""CREATE TABLE IF NOT EXISTS purchases(
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            payment_id TEXT NOT NULL UNIQUE,
            user_id INTEGER NOT NULL,
            kind TEXT NOT NULL,
            item_id TEXT NOT NULL,
            credits INTEGER NOT NULL,
            amount_cents INTEGER,
            currency TEXT,
            created_at INTEGER NOT NULL
        )""")
        cur.execute("""CREATE TABLE IF NOT EXISTS generations(
            id TEXT PRIMARY KEY,
            user_id INTEGER NOT NULL,
            task_id TEXT,
            prompt TEXT NOT NULL,
            mode TEXT NOT NULL,
            model TEXT NOT NULL,
            duration INTEGER NOT NULL,
            quality TEXT NOT NULL,
            aspect_ratio TEXT NOT NULL,
            generate_audio INTEGER NOT NULL DEFAULT 0,
            cost INTEGER NOT NULL DEFAULT 0,
            usage_transaction_id INTEGER,
            status TEXT NOT NULL DEFAULT 'processing',
            progress INTEGER NOT NULL DEFAULT 0,
            video_url TEXT,
            error TEXT,
            refunded INTEGER NOT NULL DEFAULT 0,
            created_at INTEGER NOT NULL,
            updated_at INTEGER NOT NULL
        )""")
        cur.execute("""CREATE INDEX IF NOT EXISTS idx_generations_user
                       ON generations(user_id, created_at)""")
        con.commit()
    logger.info("Database ready", extra={"db_path": DB_PATH})


# -------------------
# Users
# -------------------
def _user_from_row(row) -> dict | None:
    if not row:
        return None
    return {key: row[key] for key in _USER_COLUMNS}


def create_user(email: str, name: str | None = None, role: str = "user") -> dict:
    cleaned = (email or "").strip().lower()
    if not cleaned or "@" not in cleaned:
        raise ValueError("A valid email address is required")
    now = int(time.time())
    with closing(_connect()) as con:
        cur = con.cursor()
        try:
            cur.execute(
                """INSERT INTO users(email, name, role, credits, created_at)
                       VALUES(?,?,?,0,?)""",
                (cleaned, (name or "").strip() or None, role, now),
            )
        except sqlite3.IntegrityError as exc:
            raise ValueError(f"User {cleaned} already exists") from exc
        con.commit()
        user_id = cur.lastrowid
    return get_user(user_id)


def get_user(user_id):
    with closing(_connect()) as con:
        cur = con.cursor()
        cur.execute(f"SELECT {','.join(_USER_COLUMNS)} FROM users WHERE user_id=?", (user_id,))
        return _user_from_row(cur.fetchone())


def get_user_by_email(email: str):
    cleaned = (email or "").strip().lower()
    if not cleaned:
        return None
    with closing(_connect()) as con:
        cur = con.cursor()
        cur.execute(f"SELECT {','.join(_USER_COLUMNS)} FROM users WHERE email=? LIMIT 1", (cleaned,))
        return _user_from_row(cur.fetchone())


def set_user_role(user_id: int, role: str) -> None:
    with closing(_connect()) as con:
        cur = con.cursor()
        cur.execute("UPDATE users SET role=? WHERE user_id=?", (role, user_id))
        con.commit()
        if cur.rowcount == 0:
            raise ValueError(f"User {user_id} does not exist")


def list_users(limit=20, offset=0):
    with closing(_connect()) as con:
        cur = con.cursor()
        cur.execute(
            f"""SELECT {','.join(_USER_COLUMNS)} FROM users
                   ORDER BY created_at DESC, user_id DESC LIMIT ? OFFSET ?""",
            (limit, offset),
        )
        return [_user_from_row(row) for row in cur.fetchall()]


# -------------------
# API keys
# -------------------
def _generate_and_store_api_key(user_id: int, allow_existing: bool) -> str:
    with closing(_connect()) as con:
        cur = con.cursor()
        cur.execute(
            "SELECT api_key_id, api_key_encrypted, api_key_revoked_at FROM users WHERE user_id=?",
            (user_id,),
        )
        row = cur.fetchone()
        if not row:
            raise ValueError(f"User {user_id} does not exist")
        existing_id, encrypted_value, revoked_at = tuple(row)
        if allow_existing and existing_id and encrypted_value and not revoked_at:
            return _decrypt_api_key(encrypted_value)

        while True:
            key_id, secret, api_key = _generate_api_key_material()
            cur.execute("SELECT 1 FROM users WHERE api_key_id=?", (key_id,))
            if not cur.fetchone():
                break

        salt = secrets.token_bytes(16)
        secret_hash = _hash_secret(secret, salt)
        encrypted_value = _encrypt_api_key(api_key)
        now = int(time.time())
        cur.execute(
            """UPDATE users
                   SET api_key_id=?,
                       api_key_secret_hash=?,
                       api_key_salt=?,
                       api_key_encrypted=?,
                       api_key_created_at=?,
                       api_key_revoked_at=NULL
                 WHERE user_id=?""",
            (
                key_id,
                secret_hash,
                base64.urlsafe_b64encode(salt).decode("utf-8"),
                encrypted_value,
                now,
                user_id,
            ),
        )
        con.commit()
    return api_key


def ensure_user_api_key(user_id: int) -> str:
    try:
        return _generate_and_store_api_key(user_id, allow_existing=True)
    except RuntimeError:
        # A rotated encryption secret makes the stored key unreadable.
        logger.warning("Stored API key could not be decrypted; issuing a replacement", extra={"user_id": user_id})
        return _generate_and_store_api_key(user_id, allow_existing=False)


def regenerate_user_api_key(user_id: int) -> str:
    return _generate_and_store_api_key(user_id, allow_existing=False)


def revoke_user_api_key(user_id: int) -> None:
    with closing(_connect()) as con:
        cur = con.cursor()
        cur.execute(
            """UPDATE users
                   SET api_key_id=NULL,
                       api_key_secret_hash=NULL,
                       api_key_salt=NULL,
                       api_key_encrypted=NULL,
                       api_key_revoked_at=?
                 WHERE user_id=?""",
            (int(time.time()), user_id),
        )
        con.commit()
        if cur.rowcount == 0:
            raise ValueError(f"User {user_id} does not exist")


def get_user_api_key(user_id: int, reveal: bool = False) -> dict | None:
    with closing(_connect()) as con:
        cur = con.cursor()
        cur.execute(
            """SELECT api_key_id, api_key_encrypted, api_key_created_at,
                          api_key_last_used_at, api_key_revoked_at
                   FROM users WHERE user_id=?""",
            (user_id,),
        )
        row = cur.fetchone()
        if not row:
            return None
    key_id, encrypted_value, created_at, last_used_at, revoked_at = tuple(row)
    api_key_value = None
    masked_value = None
    if encrypted_value and not revoked_at:
        try:
            full_value = _decrypt_api_key(encrypted_value)
        except RuntimeError:
            full_value = None
        if full_value:
            masked_value = f"{full_value[:8]}…{full_value[-4:]}"
            if reveal:
                api_key_value = full_value
    return {
        "user_id": user_id,
        "key_id": key_id,
        "masked_key": masked_value,
        "api_key": api_key_value,
        "created_at": created_at,
        "last_used_at": last_used_at,
        "revoked_at": revoked_at,
    }


def verify_api_key(api_key: str) -> dict | None:
    if not api_key or "." not in api_key or "-" not in api_key:
        return None
    try:
        prefix, secret = api_key.split(".", 1)
        if not prefix.startswith(f"{_API_KEY_HEADER_PREFIX}{_API_KEY_VERSION}-"):
            return None
        _, key_id = prefix.split("-", 1)
    except ValueError:
        return None
    with closing(_connect()) as con:
        cur = con.cursor()
        cur.execute(
            f"""SELECT {','.join(_USER_COLUMNS)},
                          api_key_secret_hash, api_key_salt, api_key_revoked_at
                   FROM users WHERE api_key_id=?""",
            (key_id,),
        )
        row = cur.fetchone()
        if not row:
            return None
        if row["api_key_revoked_at"]:
            return None
        secret_hash = row["api_key_secret_hash"]
        salt = row["api_key_salt"]
        if not secret_hash or not salt:
            return None
        try:
            salt_bytes = base64.urlsafe_b64decode(salt.encode("utf-8"))
        except ValueError:
            return None
        candidate = _hash_secret(secret, salt_bytes)
        if not hmac.compare_digest(candidate, secret_hash):
            return None
        cur.execute(
            "UPDATE users SET api_key_last_used_at=?, last_seen=? WHERE user_id=?",
            (int(time.time()), int(time.time()), row["user_id"]),
        )
        con.commit()
        return _user_from_row(row)


# -------------------
# Credits ledger
# -------------------
def _transaction_from_row(row) -> dict:
    return {
        "id": row["id"],
        "user_id": row["user_id"],
        "type": row["type"],
        "amount": row["amount"],
        "remaining_amount": row["remaining_amount"],
        "description": row["description"] or "",
        "payment_id": row["payment_id"],
        "expires_at": row["expires_at"],
        "created_at": row["created_at"],
    }


def add_credits(
    user_id: int,
    amount: int,
    type: str,
    description: str | None = None,
    payment_id: str | None = None,
    expire_days: int | None = None,
) -> int:
    """Grant ``amount`` credits and return the id of the ledger row."""

    amount = int(amount)
    if amount <= 0:
        raise ValueError("Credit amount must be positive")
    now = int(time.time())
    expires_at = now + int(expire_days) * _SECONDS_PER_DAY if expire_days else None
    with closing(_connect()) as con:
        cur = con.cursor()
        transaction_id = _grant(cur, user_id, amount, type, description, payment_id, expires_at, now)
        con.commit()
    logger.info(
        "Credits added",
        extra={"user_id": user_id, "amount": amount, "type": type, "payment_id": payment_id},
    )
    return transaction_id


def _grant(cur, user_id, amount, type, description, payment_id, expires_at, now) -> int:
    cur.execute("UPDATE users SET credits = credits + ? WHERE user_id=?", (amount, user_id))
    if cur.rowcount == 0:
        raise ValueError(f"User {user_id} does not exist")
    cur.execute(
        """INSERT INTO credit_transactions(
               user_id, type, amount, remaining_amount, description,
               payment_id, expires_at, created_at)
               VALUES(?,?,?,?,?,?,?,?)""",
        (user_id, type, amount, amount, description, payment_id, expires_at, now),
    )
    return cur.lastrowid


def _expire_overdue(cur, now: int, user_id: int | None = None) -> int:
    query = """SELECT id, user_id, remaining_amount FROM credit_transactions
                   WHERE amount > 0 AND remaining_amount > 0
                     AND expires_at IS NOT NULL AND expires_at <= ?"""
    params: list = [now]
    if user_id is not None:
        query += " AND user_id=?"
        params.append(user_id)
    cur.execute(query, params)
    rows = cur.fetchall()
    for row in rows:
        remaining = row["remaining_amount"]
        cur.execute("UPDATE credit_transactions SET remaining_amount = 0 WHERE id=?", (row["id"],))
        cur.execute(
            "UPDATE users SET credits = credits - ? WHERE user_id=?",
            (remaining, row["user_id"]),
        )
        cur.execute(
            """INSERT INTO credit_transactions(user_id, type, amount, remaining_amount, description, created_at)
                   VALUES(?,?,?,0,?,?)""",
            (row["user_id"], "expire", -remaining, f"Expired grant #{row['id']}", now),
        )
    return len(rows)


def consume_credits(user_id: int, amount: int, description: str | None = None) -> int | None:
    """Debit ``amount`` credits and return the id of the usage row.

    Grants already past their expiry are forfeited first, so they can never
    fund the debit.  Returns ``None`` when the remaining balance is short.
    """

    amount = int(amount)
    if amount <= 0:
        raise ValueError("Credit amount must be positive")
    now = int(time.time())
    with closing(_connect()) as con:
        cur = con.cursor()
        _expire_overdue(cur, now, user_id)
        cur.execute(
            "UPDATE users SET credits = credits - ? WHERE user_id=? AND credits >= ?",
            (amount, user_id, amount),
        )
        if cur.rowcount == 0:
            con.commit()
            return None

        cur.execute(
            """INSERT INTO credit_transactions(user_id, type, amount, remaining_amount, description, created_at)
                   VALUES(?,?,?,0,?,?)""",
            (user_id, "usage", -amount, description, now),
        )
        usage_id = cur.lastrowid

        # Spend the grants that expire first.
        cur.execute(
            """SELECT id, remaining_amount FROM credit_transactions
                   WHERE user_id=? AND amount > 0 AND remaining_amount > 0
                   ORDER BY expires_at IS NULL, expires_at, id""",
            (user_id,),
        )
        outstanding = amount
        for row in cur.fetchall():
            if outstanding <= 0:
                break
            take = min(outstanding, row["remaining_amount"])
            con.execute(
                "UPDATE credit_transactions SET remaining_amount = remaining_amount - ? WHERE id=?",
                (take, row["id"]),
            )
            con.execute(
                "INSERT INTO credit_draws(usage_id, grant_id, amount) VALUES(?,?,?)",
                (usage_id, row["id"], take),
            )
            outstanding -= take
        con.commit()
    logger.info("Credits consumed", extra={"user_id": user_id, "amount": amount})
    return usage_id


def refund_credits(user_id: int, usage_id: int, description: str | None = None) -> int:
    """Put a debit back onto the grants it was drawn from.

    Refunded credits keep the expiry of their grant; any that land on an
    overdue grant are forfeited again straight away.  Returns the amount
    refunded, ``0`` when the usage row was already refunded.
    """

    now = int(time.time())
    with closing(_connect()) as con:
        cur = con.cursor()
        cur.execute(
            """SELECT d.grant_id, d.amount FROM credit_draws d
                   JOIN credit_transactions t ON t.id = d.usage_id
                   WHERE d.usage_id=? AND t.user_id=?""",
            (usage_id, user_id),
        )
        draws = cur.fetchall()
        if not draws:
            return 0
        total = 0
        for row in draws:
            cur.execute(
                "UPDATE credit_transactions SET remaining_amount = remaining_amount + ? WHERE id=?",
                (row["amount"], row["grant_id"]),
            )
            total += row["amount"]
        cur.execute("DELETE FROM credit_draws WHERE usage_id=?", (usage_id,))
        cur.execute("UPDATE users SET credits = credits + ? WHERE user_id=?", (total, user_id))
        cur.execute(
            """INSERT INTO credit_transactions(user_id, type, amount, remaining_amount, description, created_at)
                   VALUES(?,?,?,0,?,?)""",
            (user_id, "refund", total, description, now),
        )
        _expire_overdue(cur, now, user_id)
        con.commit()
    logger.info("Credits refunded", extra={"user_id": user_id, "amount": total, "usage_id": usage_id})
    return total


def get_credit_balance(user_id: int) -> int:
    with closing(_connect()) as con:
        cur = con.cursor()
        cur.execute("SELECT credits FROM users WHERE user_id=?", (user_id,))
        row = cur.fetchone()
        return int(row[0]) if row else 0


def list_credit_transactions(user_id: int, limit: int = 20) -> list[dict]:
    with closing(_connect()) as con:
        cur = con.cursor()
        cur.execute(
            """SELECT * FROM credit_transactions WHERE user_id=?
                   ORDER BY id DESC LIMIT ?""",
            (user_id, limit),
        )
        return [_transaction_from_row(row) for row in cur.fetchall()]


def expire_credits(now: int | None = None) -> int:
    """Forfeit the unspent part of every grant past its expiry."""

    now = int(now if now is not None else time.time())
    with closing(_connect()) as con:
        expired = _expire_overdue(con.cursor(), now)
        con.commit()
    if expired:
        logger.info("Expired credit grants", extra={"count": expired})
    return expired


# -------------------
# Purchases
# -------------------
def fulfill_purchase(
    payment_id: str,
    user_id: int,
    kind: str,
    item_id: str,
    credits: int,
    type: str,
    *,
    amount_cents: int | None = None,
    currency: str | None = None,
    description: str | None = None,
    expire_days: int | None = None,
) -> bool:
    """Record a payment and grant its credits in a single transaction.

    Returns ``False`` when ``payment_id`` was fulfilled before.
    """

    credits = int(credits)
    if credits <= 0:
        raise ValueError("Credit amount must be positive")
    now = int(time.time())
    expires_at = now + int(expire_days) * _SECONDS_PER_DAY if expire_days else None
    with closing(_connect()) as con:
        cur = con.cursor()
        cur.execute(
            """INSERT OR IGNORE INTO purchases(
                   payment_id, user_id, kind, item_id, credits, amount_cents, currency, created_at)
                   VALUES(?,?,?,?,?,?,?,?)""",
            (payment_id, user_id, kind, item_id, credits, amount_cents, currency, now),
        )
        if cur.rowcount == 0:
            con.rollback()
            return False
        _grant(cur, user_id, credits, type, description, payment_id, expires_at, now)
        con.commit()
    logger.info(
        "Purchase fulfilled",
        extra={"user_id": user_id, "amount": credits, "type": type, "payment_id": payment_id},
    )
    return True


def list_purchases(user_id: int) -> list[dict]:
    with closing(_connect()) as con:
        cur = con.cursor()
        cur.execute("SELECT * FROM purchases WHERE user_id=? ORDER BY id DESC", (user_id,))
        return [dict(row) for row in cur.fetchall()]


# -------------------
# Generations
# -------------------
def _generation_from_row(row) -> dict | None:
    if not row:
        return None
    data = dict(row)
    data["generate_audio"] = bool(data["generate_audio"])
    data["refunded"] = bool(data["refunded"])
    return data


def create_generation(
    user_id: int,
    *,
    task_id: str,
    prompt: str,
    mode: str,
    model: str,
    duration: int,
    quality: str,
    aspect_ratio: str,
    generate_audio: bool,
    cost: int,
    usage_transaction_id: int | None = None,
) -> dict:
    generation_id = f"gen_{secrets.token_hex(8)}"
    now = int(time.time())
    with closing(_connect()) as con:
        con.execute(
            """INSERT INTO generations(
                   id, user_id, task_id, prompt, mode, model, duration, quality,
                   aspect_ratio, generate_audio, cost, usage_transaction_id, status, progress,
                   created_at, updated_at)
                   VALUES(?,?,?,?,?,?,?,?,?,?,?,?,'processing',0,?,?)""",
            (
                generation_id,
                user_id,
                task_id,
                prompt,
                mode,
                model,
                int(duration),
                quality,
                aspect_ratio,
                1 if generate_audio else 0,
                int(cost),
                usage_transaction_id,
                now,
                now,
            ),
        )
        con.commit()
    return get_generation(user_id, generation_id)


def get_generation(user_id: int, generation_id: str) -> dict | None:
    with closing(_connect()) as con:
        cur = con.cursor()
        cur.execute("SELECT * FROM generations WHERE id=? AND user_id=?", (generation_id, user_id))
        return _generation_from_row(cur.fetchone())


def get_generation_by_task(user_id: int, task_id: str) -> dict | None:
    with closing(_connect()) as con:
        cur = con.cursor()
        cur.execute("SELECT * FROM generations WHERE task_id=? AND user_id=?", (task_id, user_id))
        return _generation_from_row(cur.fetchone())


def update_generation(generation_id: str, **fields) -> None:
    allowed = {"status", "progress", "video_url", "error"}
    unknown = set(fields) - allowed
    if unknown:
        raise ValueError(f"Unknown generation fields: {sorted(unknown)}")
    if not fields:
        return
    assignments = ", ".join(f"{key}=?" for key in fields)
    values = list(fields.values()) + [int(time.time()), generation_id]
    with closing(_connect()) as con:
        con.execute(f"UPDATE generations SET {assignments}, updated_at=? WHERE id=?", values)
        con.commit()


def mark_generation_refunded(generation_id: str) -> bool:
    with closing(_connect()) as con:
        cur = con.cursor()
        cur.execute("UPDATE generations SET refunded=1 WHERE id=? AND refunded=0", (generation_id,))
        con.commit()
        return cur.rowcount > 0


def list_generations(user_id: int, status: str | None = None) -> list[dict]:
    query = "SELECT * FROM generations WHERE user_id=?"
    params: list = [user_id]
    if status:
        query += " AND status=?"
        params.append(status)
    query += " ORDER BY created_at DESC, rowid DESC"
    with closing(_connect()) as con:
        cur = con.cursor()
        cur.execute(query, params)
        return [_generation_from_row(row) for row in cur.fetchall()]


def delete_generation(user_id: int, generation_id: str) -> bool:
    with closing(_connect()) as con:
        cur = con.cursor()
        cur.execute("DELETE FROM generations WHERE id=? AND user_id=?", (generation_id, user_id))
        con.commit()
        return cur.rowcount > 0

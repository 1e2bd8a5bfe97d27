"""
Expiry Reminder — Local Directory Database.

SQLite-backed stores for accounts, assets, notification profiles and the
dispatch ledger. Used by the sqlite directory adapter when the service
runs without the hosted backend, and always for the dispatch ledger.
List-valued columns are stored as JSON text.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from datetime import date, datetime
from pathlib import Path

from expiry_reminder.data.models import NotificationLog

logger = logging.getLogger(__name__)


class _SQLiteStore:
    """Connection handling shared by every store.

    A file-backed store opens a fresh connection per operation. An
    in-memory store (":memory:") lives only as long as its connection, so
    it keeps a single connection for the lifetime of the store.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._memory_conn: sqlite3.Connection | None = None
        if db_path == ":memory:":
            # Reads may run in a worker thread (asyncio.to_thread)
            self._memory_conn = sqlite3.connect(":memory:", check_same_thread=False)
            self._memory_conn.row_factory = sqlite3.Row
        else:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        if self._memory_conn is not None:
            return self._memory_conn
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        raise NotImplementedError


def _dump_list(values: list | tuple | None) -> str | None:
    if values is None:
        return None
    return json.dumps(list(values), ensure_ascii=False)


def _load_list(raw: str | None) -> list | None:
    if raw is None:
        return None
    return json.loads(raw)


class AccountDB(_SQLiteStore):
    """Account directory: account id → email address."""

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS accounts (
                    id          TEXT PRIMARY KEY,
                    email       TEXT,
                    created_at  TEXT NOT NULL
                )
            """)
        logger.debug("Accounts table initialized at %s", self._db_path)

    def add_account(self, email: str | None, account_id: str | None = None) -> dict:
        """Register an account. Returns the stored row as a dict."""
        account_id = account_id or str(uuid.uuid4())
        now = datetime.now().isoformat()
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO accounts (id, email, created_at) VALUES (?, ?, ?)",
                (account_id, email, now),
            )
        logger.info("Account registered: %s <%s>", account_id, email)
        return {"id": account_id, "email": email, "created_at": now}

    def list_accounts(self) -> list[dict]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM accounts ORDER BY created_at").fetchall()
        return [dict(r) for r in rows]


class AssetDB(_SQLiteStore):
    """Owner-managed assets with their expiry dates."""

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS assets (
                    id                   TEXT PRIMARY KEY,
                    user_id              TEXT NOT NULL,
                    name                 TEXT NOT NULL,
                    type                 TEXT NOT NULL DEFAULT 'Other',
                    expiry_date          TEXT NOT NULL,
                    renewal_method       TEXT NOT NULL DEFAULT '',
                    websites             TEXT NOT NULL DEFAULT '[]',
                    notes                TEXT NOT NULL DEFAULT '',
                    notification_enabled INTEGER NOT NULL DEFAULT 1,
                    notify_advance_days  TEXT,
                    created_at           TEXT NOT NULL
                )
            """)
        logger.debug("Assets table initialized at %s", self._db_path)

    @staticmethod
    def _row_to_dict(row: sqlite3.Row) -> dict:
        d = dict(row)
        d["websites"] = _load_list(d["websites"]) or []
        d["notify_advance_days"] = _load_list(d["notify_advance_days"])
        d["notification_enabled"] = bool(d["notification_enabled"])
        return d

    def add_asset(
        self,
        user_id: str,
        name: str,
        expiry_date: str | date,
        asset_type: str = "Other",
        renewal_method: str = "",
        websites: list[str] | None = None,
        notes: str = "",
        notification_enabled: bool = True,
        notify_advance_days: list[int] | None = None,
    ) -> dict:
        """Insert a new asset. Returns the stored row as a dict."""
        if isinstance(expiry_date, date):
            expiry_date = expiry_date.isoformat()
        asset_id = str(uuid.uuid4())
        now = datetime.now().isoformat()
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO assets
                    (id, user_id, name, type, expiry_date, renewal_method,
                     websites, notes, notification_enabled, notify_advance_days,
                     created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    asset_id, user_id, name, asset_type, expiry_date, renewal_method,
                    _dump_list(websites or []), notes, int(notification_enabled),
                    _dump_list(notify_advance_days), now,
                ),
            )
        logger.info("Asset added: %s '%s' expires %s", asset_id, name, expiry_date)
        return self.get_asset(asset_id)

    def get_asset(self, asset_id: str) -> dict | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM assets WHERE id = ?", (asset_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_dict(row)

    def list_assets(self, user_id: str | None = None) -> list[dict]:
        """List assets ordered by expiry date, optionally for one owner."""
        query = "SELECT * FROM assets"
        params: list = []
        if user_id is not None:
            query += " WHERE user_id = ?"
            params.append(user_id)
        query += " ORDER BY expiry_date"
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_dict(r) for r in rows]

    _UPDATABLE = {
        "name", "type", "expiry_date", "renewal_method", "websites",
        "notes", "notification_enabled", "notify_advance_days",
    }

    def update_asset(self, asset_id: str, **fields: object) -> dict:
        """Update the given columns of an asset. Raises ValueError if missing."""
        unknown = set(fields) - self._UPDATABLE
        if unknown:
            raise ValueError(f"Unknown asset fields: {sorted(unknown)}")
        if not fields:
            asset = self.get_asset(asset_id)
            if asset is None:
                raise ValueError(f"Asset {asset_id} not found")
            return asset

        values: dict[str, object] = {}
        for key, value in fields.items():
            if key in ("websites", "notify_advance_days"):
                value = _dump_list(value)
            elif key == "notification_enabled":
                value = int(bool(value))
            elif key == "expiry_date" and isinstance(value, date):
                value = value.isoformat()
            values[key] = value

        assignments = ", ".join(f"{key} = ?" for key in values)
        with self._connect() as conn:
            cursor = conn.execute(
                f"UPDATE assets SET {assignments} WHERE id = ?",
                (*values.values(), asset_id),
            )
        if cursor.rowcount == 0:
            raise ValueError(f"Asset {asset_id} not found")
        logger.info("Asset %s updated: %s", asset_id, ", ".join(sorted(values)))
        return self.get_asset(asset_id)

    def set_notification_enabled(self, asset_id: str, enabled: bool) -> dict:
        return self.update_asset(asset_id, notification_enabled=enabled)

    def delete_asset(self, asset_id: str) -> bool:
        """Permanently delete an asset by ID."""
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM assets WHERE id = ?", (asset_id,))
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Asset %s deleted", asset_id)
        return deleted


class ProfileDB(_SQLiteStore):
    """Per-account notification settings (chat token, notify days)."""

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS profiles (
                    id              TEXT PRIMARY KEY,
                    wechat_webhook  TEXT,
                    notify_days     TEXT
                )
            """)
        logger.debug("Profiles table initialized at %s", self._db_path)

    @staticmethod
    def _row_to_dict(row: sqlite3.Row) -> dict:
        d = dict(row)
        d["notify_days"] = _load_list(d["notify_days"])
        return d

    def upsert_profile(
        self,
        account_id: str,
        wechat_webhook: str | None = None,
        notify_days: list[int] | None = None,
    ) -> dict:
        """Insert or replace an account's settings."""
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO profiles (id, wechat_webhook, notify_days)
                VALUES (?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    wechat_webhook = excluded.wechat_webhook,
                    notify_days = excluded.notify_days
                """,
                (account_id, wechat_webhook, _dump_list(notify_days)),
            )
        logger.info("Profile saved for account %s", account_id)
        return self.get_profile(account_id)

    def get_profile(self, account_id: str) -> dict | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM profiles WHERE id = ?", (account_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_dict(row)

    def list_profiles(self) -> list[dict]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM profiles").fetchall()
        return [self._row_to_dict(r) for r in rows]


class NotificationLogDB(_SQLiteStore):
    """Dispatch ledger: one row per send attempt."""

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS notification_logs (
                    id          INTEGER PRIMARY KEY AUTOINCREMENT,
                    asset_id    TEXT NOT NULL,
                    owner_id    TEXT NOT NULL,
                    channel     TEXT NOT NULL,
                    recipient   TEXT NOT NULL,
                    status      TEXT NOT NULL,
                    detail      TEXT NOT NULL DEFAULT '',
                    sent_on     TEXT NOT NULL,
                    created_at  TEXT NOT NULL
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_notification_logs_day "
                "ON notification_logs (sent_on, asset_id, channel)"
            )
        logger.debug("Notification log table initialized at %s", self._db_path)

    @staticmethod
    def _row_to_log(row: sqlite3.Row) -> NotificationLog:
        return NotificationLog(
            id=row["id"],
            asset_id=row["asset_id"],
            owner_id=row["owner_id"],
            channel=row["channel"],
            recipient=row["recipient"],
            status=row["status"],
            detail=row["detail"],
            sent_on=row["sent_on"],
            created_at=row["created_at"],
        )

    def record(
        self,
        asset_id: str,
        owner_id: str,
        channel: str,
        recipient: str,
        status: str,
        sent_on: date,
        detail: str = "",
    ) -> NotificationLog:
        """Append one dispatch attempt to the ledger."""
        now = datetime.now().isoformat()
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO notification_logs
                    (asset_id, owner_id, channel, recipient, status, detail, sent_on, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (asset_id, owner_id, channel, recipient, status, detail, sent_on.isoformat(), now),
            )
            log_id = cursor.lastrowid
        return NotificationLog(
            id=log_id,
            asset_id=asset_id,
            owner_id=owner_id,
            channel=channel,
            recipient=recipient,
            status=status,
            detail=detail,
            sent_on=sent_on.isoformat(),
            created_at=now,
        )

    def has_sent(self, asset_id: str, channel: str, sent_on: date) -> bool:
        """True if a successful send exists for this asset/channel/day."""
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT 1 FROM notification_logs
                WHERE asset_id = ? AND channel = ? AND sent_on = ? AND status = 'sent'
                """,
                (asset_id, channel, sent_on.isoformat()),
            ).fetchone()
        return row is not None

    def count_sent_on(self, sent_on: date, channel: str | None = None) -> int:
        """Count successful sends on a day, optionally for one channel."""
        query = "SELECT COUNT(*) FROM notification_logs WHERE sent_on = ? AND status = 'sent'"
        params: list = [sent_on.isoformat()]
        if channel is not None:
            query += " AND channel = ?"
            params.append(channel)
        with self._connect() as conn:
            (count,) = conn.execute(query, params).fetchone()
        return count

    def list_recent(self, limit: int = 50) -> list[NotificationLog]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM notification_logs ORDER BY id DESC LIMIT ?", (limit,),
            ).fetchall()
        return [self._row_to_log(r) for r in rows]

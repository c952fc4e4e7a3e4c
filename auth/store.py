"""
auth/store.py -- SQLAlchemy Core persistence layer for accounts.

Pattern: Repository + Data Mapper. AccountStore is the repository and the
only component that mutates or persists Account records; _row_to_account is
the mapper. Service and route code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

Uniqueness:
  UNIQUE(email) is the final arbiter for concurrent signups and email changes.
  Any check-then-write done by callers is advisory; a lost race surfaces here
  as IntegrityError and is translated to DuplicateAccountError.

Status transitions are optimistic: update_status() only writes when the row
still holds the expected status, and reports whether it did.

Timestamps are stored as ISO 8601 UTC strings and parsed back on read.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, MetaData, String, Table, create_engine, event, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from auth.errors import DuplicateAccountError
from auth.models import Account, Role, Status, normalize_email

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_accounts = Table(
    "accounts",
    _metadata,
    Column("id", String(36), primary_key=True),
    Column("email", String(254), nullable=False, unique=True),
    Column("credential_hash", String(128), nullable=False),
    Column("full_name", String(100), nullable=False),
    Column("role", String(16), nullable=False, server_default=Role.user.value),
    Column("status", String(16), nullable=False, server_default=Status.active.value),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
    Column("last_login_at", String(32)),
    CheckConstraint("role IN ('admin', 'user')", name="ck_accounts_role"),
    CheckConstraint("status IN ('active', 'inactive')", name="ck_accounts_status"),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers do not block during writes.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_ts(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class AccountStore:
    """Repository for Account records.

    Usage:
        store = AccountStore("sqlite:///:memory:")
        account = store.create_account("a@x.com", hasher.hash("Secret123"), "A")
        store.get_by_email("A@X.com")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def has_accounts(self) -> bool:
        return self.count() > 0

    def count(self) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(select(func.count()).select_from(_accounts)).scalar()
        return result or 0

    def get_by_id(self, account_id: str) -> Account | None:
        """Look up an account by identifier. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_accounts.select().where(_accounts.c.id == str(account_id))).fetchone()
        return _row_to_account(row) if row is not None else None

    def get_by_email(self, email: str) -> Account | None:
        """Look up an account by normalized email, credential hash included."""
        with self.engine.connect() as conn:
            row = conn.execute(_accounts.select().where(_accounts.c.email == normalize_email(email))).fetchone()
        return _row_to_account(row) if row is not None else None

    def email_taken(self, email: str, exclude_id: str | None = None) -> bool:
        """Return True if another account already owns this email."""
        query = select(_accounts.c.id).where(_accounts.c.email == normalize_email(email))
        if exclude_id is not None:
            query = query.where(_accounts.c.id != str(exclude_id))
        with self.engine.connect() as conn:
            return conn.execute(query).first() is not None

    def list_accounts(self, limit: int, offset: int = 0) -> list[Account]:
        """Return one window of accounts, newest created_at first."""
        query = (
            _accounts.select()
            .order_by(_accounts.c.created_at.desc(), _accounts.c.id)
            .limit(limit)
            .offset(offset)
        )
        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_account(r) for r in rows]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_account(
        self,
        email: str,
        credential_hash: str,
        full_name: str,
        role: Role = Role.user,
        status: Status = Status.active,
    ) -> Account:
        """Insert a new account and return it with its assigned identifier.

        Raises DuplicateAccountError if the normalized email is already taken,
        including when a concurrent request won the race.
        """
        now = _now().isoformat()
        values = {
            "id": str(uuid.uuid4()),
            "email": normalize_email(email),
            "credential_hash": credential_hash,
            "full_name": full_name.strip(),
            "role": Role(role).value,
            "status": Status(status).value,
            "created_at": now,
            "updated_at": now,
        }
        try:
            with self.engine.connect() as conn:
                conn.execute(_accounts.insert().values(**values))
                conn.commit()
        except IntegrityError as exc:
            raise DuplicateAccountError() from exc
        return _row_to_account(values)

    def update_status(self, account_id: str, status: Status, expected: Status) -> bool:
        """Set status only if the row still holds `expected`.

        Returns True if a row was updated, False if the account is gone or
        another writer changed its status first.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _accounts.update()
                .where((_accounts.c.id == str(account_id)) & (_accounts.c.status == Status(expected).value))
                .values(status=Status(status).value, updated_at=_now().isoformat())
            )
            conn.commit()
        return result.rowcount > 0

    def update_last_login(self, account_id: str, when: datetime | None = None) -> datetime:
        """Stamp last_login_at for a successful login and return the stamp."""
        stamp = when or _now()
        with self.engine.connect() as conn:
            conn.execute(
                _accounts.update()
                .where(_accounts.c.id == str(account_id))
                .values(last_login_at=stamp.isoformat(), updated_at=stamp.isoformat())
            )
            conn.commit()
        return stamp

    def update_profile(self, account_id: str, email: str | None = None, full_name: str | None = None) -> bool:
        """Update email and/or full name.

        Raises DuplicateAccountError if the new email belongs to another account.
        Returns True if a row was updated, False if account_id was not found.
        """
        fields: dict = {}
        if email is not None:
            fields["email"] = normalize_email(email)
        if full_name is not None:
            fields["full_name"] = full_name.strip()
        if not fields:
            return self.get_by_id(account_id) is not None
        fields["updated_at"] = _now().isoformat()
        try:
            with self.engine.connect() as conn:
                result = conn.execute(_accounts.update().where(_accounts.c.id == str(account_id)).values(**fields))
                conn.commit()
        except IntegrityError as exc:
            raise DuplicateAccountError("Email already in use") from exc
        return result.rowcount > 0

    def update_password(self, account_id: str, credential_hash: str) -> bool:
        with self.engine.connect() as conn:
            result = conn.execute(
                _accounts.update()
                .where(_accounts.c.id == str(account_id))
                .values(credential_hash=credential_hash, updated_at=_now().isoformat())
            )
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_account(row) -> Account:
    # Accepts both Row objects and the plain dict built by create_account().
    data = row if isinstance(row, dict) else row._mapping
    return Account(
        id=data["id"],
        email=data["email"],
        credential_hash=data["credential_hash"],
        full_name=data["full_name"],
        role=Role(data["role"]),
        status=Status(data["status"]),
        created_at=_parse_ts(data["created_at"]),
        updated_at=_parse_ts(data["updated_at"]),
        last_login_at=_parse_ts(data.get("last_login_at")),
    )

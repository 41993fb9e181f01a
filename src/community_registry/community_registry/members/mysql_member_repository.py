from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional, Sequence

from mysql.connector import errorcode
from mysql.connector import errors as mysql_errors

from ..core.enums import Role
from ..core.exceptions import DuplicateContactError, SequenceCollisionError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Account, Member, MemberProfile
from .repository import MemberRepository, RegistrationUnit

# Unique key names from database/schema.sql
_EMAIL_KEY = "uq_accounts_email"
_PHONE_KEY = "uq_accounts_phone"
_SEQUENCE_KEYS = ("uq_members_group_sequence", "uq_members_community_id")

_RETRYABLE_ERRNOS = (errorcode.ER_LOCK_DEADLOCK, errorcode.ER_LOCK_WAIT_TIMEOUT)

_ACCOUNT_COLUMNS = "a.account_id, a.email, a.phone, a.password_hash, a.role, a.is_active, a.created_at"
# created_at is left to the member row when the two tables are joined.
_ACCOUNT_JOIN_COLUMNS = "a.email, a.phone, a.password_hash, a.role, a.is_active"
_MEMBER_COLUMNS = (
    "m.member_id, m.account_id, m.first_name, m.last_name, m.middle_name, m.nickname, m.suffix, "
    "m.community_id, m.location_code, m.program_code, m.class_number, m.sequence, m.created_at"
)


def _row_to_account(r: dict, *, with_created_at: bool = True) -> Account:
    return Account(
        account_id=int(r["account_id"]),
        email=r.get("email"),
        phone=r.get("phone"),
        password_hash=r["password_hash"],
        role=Role(r["role"]),
        is_active=bool(r.get("is_active", True)),
        created_at=r.get("created_at") if with_created_at else None,
    )


def _row_to_member(r: dict) -> Member:
    return Member(
        member_id=int(r["member_id"]),
        account_id=int(r["account_id"]),
        first_name=r["first_name"],
        last_name=r["last_name"],
        middle_name=r.get("middle_name"),
        nickname=r.get("nickname"),
        suffix=r.get("suffix"),
        community_id=r["community_id"],
        location_code=r["location_code"],
        program_code=r["program_code"],
        class_number=int(r["class_number"]),
        sequence=int(r["sequence"]),
        created_at=r.get("created_at"),
    )


def _translate_write_error(exc: mysql_errors.Error) -> Exception:
    """Map constraint violations onto domain errors; anything else passes through."""
    if exc.errno in _RETRYABLE_ERRNOS:
        return SequenceCollisionError(str(exc))
    if exc.errno == errorcode.ER_DUP_ENTRY:
        message = str(exc)
        if _EMAIL_KEY in message:
            return DuplicateContactError("email")
        if _PHONE_KEY in message:
            return DuplicateContactError("phone")
        if any(key in message for key in _SEQUENCE_KEYS):
            return SequenceCollisionError(message)
    return exc


class MySQLRegistrationUnit(RegistrationUnit):
    def __init__(self, cur):
        self._cur = cur

    def _execute_write(self, sql: str, params: tuple) -> None:
        try:
            self._cur.execute(sql, params)
        except mysql_errors.Error as exc:
            translated = _translate_write_error(exc)
            if translated is exc:
                raise
            raise translated from exc

    def count_accounts(self) -> int:
        self._cur.execute("SELECT COUNT(*) AS n FROM accounts")
        row = fetchone(self._cur)
        return int(row["n"]) if row else 0

    def get_account_by_email(self, email: str) -> Optional[Account]:
        self._cur.execute(f"SELECT {_ACCOUNT_COLUMNS} FROM accounts a WHERE a.email=%s", (email,))
        row = fetchone(self._cur)
        return _row_to_account(row) if row else None

    def get_account_by_phone(self, phone: str) -> Optional[Account]:
        self._cur.execute(f"SELECT {_ACCOUNT_COLUMNS} FROM accounts a WHERE a.phone=%s", (phone,))
        row = fetchone(self._cur)
        return _row_to_account(row) if row else None

    def list_group_identifiers(self, *, location_code: str, program_code: str, class_number: int) -> Sequence[str]:
        self._cur.execute(
            """
            SELECT community_id
            FROM members
            WHERE location_code=%s AND program_code=%s AND class_number=%s
            ORDER BY created_at ASC, member_id ASC
            """,
            (location_code, program_code, int(class_number)),
        )
        return [r["community_id"] for r in fetchall(self._cur)]

    def create_account(
        self,
        *,
        email: Optional[str],
        phone: Optional[str],
        password_hash: str,
        role: Role,
    ) -> Account:
        self._execute_write(
            """
            INSERT INTO accounts(email, phone, password_hash, role, is_active)
            VALUES(%s,%s,%s,%s,1)
            """,
            (email, phone, password_hash, role.value),
        )
        return Account(
            account_id=int(self._cur.lastrowid),
            email=email,
            phone=phone,
            password_hash=password_hash,
            role=role,
            is_active=True,
        )

    def create_member(
        self,
        *,
        account_id: int,
        first_name: str,
        last_name: str,
        community_id: str,
        location_code: str,
        program_code: str,
        class_number: int,
        sequence: int,
        middle_name: Optional[str] = None,
        nickname: Optional[str] = None,
        suffix: Optional[str] = None,
    ) -> Member:
        self._execute_write(
            """
            INSERT INTO members(account_id, first_name, last_name, middle_name, nickname, suffix,
                                community_id, location_code, program_code, class_number, sequence)
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                int(account_id),
                first_name,
                last_name,
                middle_name,
                nickname,
                suffix,
                community_id,
                location_code,
                program_code,
                int(class_number),
                int(sequence),
            ),
        )
        return Member(
            member_id=int(self._cur.lastrowid),
            account_id=int(account_id),
            first_name=first_name,
            last_name=last_name,
            middle_name=middle_name,
            nickname=nickname,
            suffix=suffix,
            community_id=community_id,
            location_code=location_code,
            program_code=program_code,
            class_number=int(class_number),
            sequence=int(sequence),
        )


class MySQLMemberRepository(MemberRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def transaction(self) -> Iterator[MySQLRegistrationUnit]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                yield MySQLRegistrationUnit(cur)
        except mysql_errors.Error as exc:
            # Deadlocks can also surface at COMMIT time.
            if exc.errno in _RETRYABLE_ERRNOS:
                raise SequenceCollisionError(str(exc)) from exc
            raise

    def get_by_community_id(self, community_id: str) -> Optional[MemberProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_MEMBER_COLUMNS}, {_ACCOUNT_JOIN_COLUMNS}
                FROM members m
                JOIN accounts a ON a.account_id = m.account_id
                WHERE m.community_id=%s
                """,
                (community_id,),
            )
            row = fetchone(cur)
            if not row:
                return None
            return MemberProfile(member=_row_to_member(row), account=_row_to_account(row, with_created_at=False))

    def set_account_active(self, account_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE accounts SET is_active=%s WHERE account_id=%s",
                (1 if is_active else 0, int(account_id)),
            )
            return cur.rowcount > 0

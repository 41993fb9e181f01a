from __future__ import annotations

import itertools
import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from typing import Optional

import pytest

from src.community_registry.community_registry.core.constants import EVENT_TIMEZONE
from src.community_registry.community_registry.core.enums import Role
from src.community_registry.community_registry.core.exceptions import DuplicateContactError, SequenceCollisionError
from src.community_registry.community_registry.members.model import Account, Member, MemberProfile


class InMemoryUnit:
    """One transaction: reads a snapshot taken at BEGIN plus its own writes."""

    def __init__(self, store: "InMemoryMembers"):
        self._store = store
        with store.lock:
            self._accounts = dict(store.accounts)
            self._members = dict(store.members)
        self.new_accounts: list[Account] = []
        self.new_members: list[Member] = []

    def count_accounts(self) -> int:
        return len(self._accounts) + len(self.new_accounts)

    def _all_accounts(self):
        return list(self._accounts.values()) + self.new_accounts

    def get_account_by_email(self, email: str) -> Optional[Account]:
        return next((a for a in self._all_accounts() if a.email == email), None)

    def get_account_by_phone(self, phone: str) -> Optional[Account]:
        return next((a for a in self._all_accounts() if a.phone == phone), None)

    def list_group_identifiers(self, *, location_code: str, program_code: str, class_number: int):
        self._store.scans += 1
        rows = [
            m
            for m in list(self._members.values()) + self.new_members
            if (m.location_code, m.program_code, m.class_number) == (location_code, program_code, class_number)
        ]
        rows.sort(key=lambda m: m.member_id)
        return [m.community_id for m in rows]

    def create_account(self, *, email, phone, password_hash, role: Role) -> Account:
        account = Account(
            account_id=next(self._store.account_ids),
            email=email,
            phone=phone,
            password_hash=password_hash,
            role=role,
        )
        self.new_accounts.append(account)
        return account

    def create_member(self, **fields) -> Member:
        member = Member(member_id=next(self._store.member_ids), **fields)
        self.new_members.append(member)
        return member


class InMemoryMembers:
    """Fake store enforcing the same unique constraints as database/schema.sql at commit."""

    def __init__(self):
        self.lock = threading.Lock()
        self.accounts: dict[int, Account] = {}
        self.members: dict[int, Member] = {}
        self.account_ids = itertools.count(1)
        self.member_ids = itertools.count(1)
        self.commits = 0
        self.rollbacks = 0
        self.scans = 0
        # Hook run between the body of a transaction and its commit.
        self.before_commit = None

    @contextmanager
    def transaction(self):
        unit = InMemoryUnit(self)
        try:
            yield unit
            if self.before_commit:
                self.before_commit(unit)
            self._commit(unit)
        except Exception:
            with self.lock:
                self.rollbacks += 1
            raise

    def _commit(self, unit: InMemoryUnit) -> None:
        with self.lock:
            for account in unit.new_accounts:
                for existing in self.accounts.values():
                    if account.email and existing.email == account.email:
                        raise DuplicateContactError("email")
                    if account.phone and existing.phone == account.phone:
                        raise DuplicateContactError("phone")
            for member in unit.new_members:
                for existing in self.members.values():
                    if existing.community_id == member.community_id or (
                        (existing.location_code, existing.program_code, existing.class_number, existing.sequence)
                        == (member.location_code, member.program_code, member.class_number, member.sequence)
                    ):
                        raise SequenceCollisionError(f"Duplicate entry '{member.community_id}'")

            for account in unit.new_accounts:
                self.accounts[account.account_id] = account
            for member in unit.new_members:
                self.members[member.member_id] = member
            self.commits += 1

    def seed_member(self, community_id: str, *, location_code: str, program_code: str, class_number: int, sequence: int):
        account = Account(
            account_id=next(self.account_ids),
            email=f"seed{sequence}-{community_id.lower()}@example.org",
            phone=None,
            password_hash="x",
            role=Role.MEMBER,
        )
        member = Member(
            member_id=next(self.member_ids),
            account_id=account.account_id,
            first_name="Seed",
            last_name=str(sequence),
            community_id=community_id,
            location_code=location_code,
            program_code=program_code,
            class_number=class_number,
            sequence=sequence,
        )
        self.accounts[account.account_id] = account
        self.members[member.member_id] = member
        return member

    def get_by_community_id(self, community_id: str) -> Optional[MemberProfile]:
        for member in self.members.values():
            if member.community_id == community_id:
                return MemberProfile(member=member, account=self.accounts[member.account_id])
        return None

    def set_account_active(self, account_id: int, *, is_active: bool) -> bool:
        account = self.accounts.get(account_id)
        if not account:
            return False
        self.accounts[account_id] = replace(account, is_active=is_active)
        return True


@pytest.fixture
def members_repo() -> InMemoryMembers:
    return InMemoryMembers()


@pytest.fixture
def fixed_now() -> datetime:
    # Tuesday
    return datetime(2024, 3, 5, 12, 0, 0, tzinfo=EVENT_TIMEZONE)

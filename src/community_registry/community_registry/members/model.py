from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Account:
    """Domain entity: login account owning exactly one member profile."""

    account_id: int
    email: Optional[str]
    phone: Optional[str]
    password_hash: str
    role: Role
    is_active: bool = True
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Member:
    """Domain entity: member profile carrying the community identifier."""

    member_id: int
    account_id: int
    first_name: str
    last_name: str
    community_id: str
    location_code: str
    program_code: str
    class_number: int
    sequence: int
    middle_name: Optional[str] = None
    nickname: Optional[str] = None
    suffix: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class MemberProfile:
    """Read-model: member joined with its account, used by lookups."""

    member: Member
    account: Account

    @property
    def is_active(self) -> bool:
        return self.account.is_active


@dataclass(frozen=True)
class RegistrationInput:
    email: Optional[str]
    phone: Optional[str]
    password: str
    first_name: str
    last_name: str
    location: str
    program: str
    class_number: str
    middle_name: Optional[str] = None
    nickname: Optional[str] = None
    suffix: Optional[str] = None


@dataclass(frozen=True)
class RegistrationResult:
    account: Account
    member: Member

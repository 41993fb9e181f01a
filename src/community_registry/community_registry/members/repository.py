from __future__ import annotations

from typing import ContextManager, Optional, Protocol, Sequence

from ..core.enums import Role
from .model import Account, MemberProfile


class RegistrationUnit(Protocol):
    """Reads and writes that run inside one registration transaction.

    Implementations raise `DuplicateContactError` when the email/phone unique
    constraint fires and `SequenceCollisionError` when the group sequence or
    community id constraint fires.
    """

    def count_accounts(self) -> int:
        raise NotImplementedError

    def get_account_by_email(self, email: str) -> Optional[Account]:
        raise NotImplementedError

    def get_account_by_phone(self, phone: str) -> Optional[Account]:
        raise NotImplementedError

    def list_group_identifiers(self, *, location_code: str, program_code: str, class_number: int) -> Sequence[str]:
        raise NotImplementedError

    def create_account(
        self,
        *,
        email: Optional[str],
        phone: Optional[str],
        password_hash: str,
        role: Role,
    ) -> Account:
        raise NotImplementedError

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
    ):
        raise NotImplementedError


class MemberRepository(Protocol):
    """Repository interface for accounts and member profiles.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def transaction(self) -> ContextManager[RegistrationUnit]:
        """Open a unit of work; commit on clean exit, roll back on error."""

        raise NotImplementedError

    def get_by_community_id(self, community_id: str) -> Optional[MemberProfile]:
        raise NotImplementedError

    def set_account_active(self, account_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

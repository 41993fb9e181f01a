from __future__ import annotations

import logging
from typing import Optional

from werkzeug.security import generate_password_hash

from ..common.contacts import normalize_email, normalize_phone
from ..common.validators import optional_text, parse_class_number, require_min_length, require_non_empty
from ..core.constants import DEFAULT_REGISTRATION_MAX_ATTEMPTS, MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import (
    DuplicateContactError,
    MemberNotFoundError,
    MissingContactError,
    SequenceCollisionError,
    TransientConflictError,
    ValidationError,
)
from .identifier import IdentifierAllocator, is_valid_community_id, make_group_key, normalize_community_id
from .model import MemberProfile, RegistrationInput, RegistrationResult
from .repository import MemberRepository, RegistrationUnit

logger = logging.getLogger(__name__)


class MembershipRegistrar:
    """Use case: sign up a new member (account + profile + community id).

    Account and member are written in one transaction. A sequence collision
    with a concurrent registration re-runs the whole transaction, at most
    ``max_attempts`` times.
    """

    def __init__(
        self,
        members: MemberRepository,
        *,
        allocator: Optional[IdentifierAllocator] = None,
        super_user_email: Optional[str] = None,
        super_user_phone: Optional[str] = None,
        max_attempts: int = DEFAULT_REGISTRATION_MAX_ATTEMPTS,
    ):
        self._members = members
        self._allocator = allocator or IdentifierAllocator()
        self._super_user_email = normalize_email(super_user_email)
        self._super_user_phone = normalize_phone(super_user_phone)
        self._max_attempts = max(1, int(max_attempts))

    def _is_designated_super_user(self, email: Optional[str], phone: Optional[str]) -> bool:
        # Unset overrides never match.
        if self._super_user_email and email == self._super_user_email:
            return True
        if self._super_user_phone and phone == self._super_user_phone:
            return True
        return False

    def _ensure_contacts_free(self, tx: RegistrationUnit, email: Optional[str], phone: Optional[str]) -> None:
        if email and tx.get_account_by_email(email):
            raise DuplicateContactError("email", "Email is already registered")
        if phone and tx.get_account_by_phone(phone):
            raise DuplicateContactError("phone", "Mobile number is already registered")

    def register(self, data: RegistrationInput) -> RegistrationResult:
        class_number = parse_class_number(data.class_number)
        first_name = require_non_empty(data.first_name, "First name")
        last_name = require_non_empty(data.last_name, "Last name")
        location = require_non_empty(data.location, "Location")
        program = require_non_empty(data.program, "Program")
        # Shape of the community id is checked before a transaction is opened.
        make_group_key(location, program, class_number)

        email = normalize_email(data.email)
        phone = normalize_phone(data.phone)
        if not email and not phone:
            raise MissingContactError("Either email or phone is required")

        require_min_length(data.password, "Password", MIN_PASSWORD_LENGTH)
        password_hash = generate_password_hash(data.password)

        for attempt in range(1, self._max_attempts + 1):
            try:
                result = self._register_once(
                    data,
                    email=email,
                    phone=phone,
                    password_hash=password_hash,
                    first_name=first_name,
                    last_name=last_name,
                    location=location,
                    program=program,
                    class_number=class_number,
                )
            except SequenceCollisionError as exc:
                logger.warning(
                    "Community id collision for %s/%s class %s (attempt %d/%d): %s",
                    location,
                    program,
                    class_number,
                    attempt,
                    self._max_attempts,
                    exc,
                )
                continue

            logger.info(
                "Registered member %s (account %s, role %s)",
                result.member.community_id,
                result.account.account_id,
                result.account.role.value,
            )
            return result

        logger.error(
            "Gave up allocating a community id for %s/%s class %s after %d attempts",
            location,
            program,
            class_number,
            self._max_attempts,
        )
        raise TransientConflictError("Registration is busy for this class. Please try again.")

    def _register_once(
        self,
        data: RegistrationInput,
        *,
        email: Optional[str],
        phone: Optional[str],
        password_hash: str,
        first_name: str,
        last_name: str,
        location: str,
        program: str,
        class_number: int,
    ) -> RegistrationResult:
        with self._members.transaction() as tx:
            self._ensure_contacts_free(tx, email, phone)

            if tx.count_accounts() == 0 or self._is_designated_super_user(email, phone):
                role = Role.SUPER_USER
            else:
                role = Role.MEMBER

            account = tx.create_account(email=email, phone=phone, password_hash=password_hash, role=role)
            community_id = self._allocator.allocate(tx, location, program, class_number)
            member = tx.create_member(
                account_id=account.account_id,
                first_name=first_name,
                last_name=last_name,
                middle_name=optional_text(data.middle_name),
                nickname=optional_text(data.nickname),
                suffix=optional_text(data.suffix),
                community_id=community_id.value,
                location_code=community_id.location_code,
                program_code=community_id.program_code,
                class_number=community_id.class_number,
                sequence=community_id.sequence,
            )
            return RegistrationResult(account=account, member=member)


class MemberLookupService:
    """Use case: resolve a scanned or typed community id to an active member."""

    def __init__(self, members: MemberRepository):
        self._members = members

    @staticmethod
    def _checked_id(raw: str) -> str:
        community_id = normalize_community_id(raw)
        if not is_valid_community_id(community_id):
            raise ValidationError(f'Invalid community ID format: "{community_id}"')
        return community_id

    def find_by_community_id(self, raw: str) -> MemberProfile:
        community_id = self._checked_id(raw)
        profile = self._members.get_by_community_id(community_id)
        if not profile:
            raise MemberNotFoundError(f'Member with Community ID "{community_id}" not found')
        if not profile.is_active:
            raise MemberNotFoundError(f'Member with Community ID "{community_id}" is inactive')
        return profile

    def deactivate(self, raw: str) -> None:
        """Soft-deactivate the owning account; the community id stays taken."""
        community_id = self._checked_id(raw)
        profile = self._members.get_by_community_id(community_id)
        if not profile:
            raise MemberNotFoundError(f'Member with Community ID "{community_id}" not found')
        if not self._members.set_account_active(profile.account.account_id, is_active=False):
            raise ValidationError("Deactivation failed")
        logger.info("Deactivated account %s (%s)", profile.account.account_id, community_id)

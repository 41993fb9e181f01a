"""Community identifiers: ``LLL-PPNNSS``.

``LLL`` is the location code, ``PP`` the 2-4 letter program code, ``NN`` the
zero-padded class number and ``SS`` the zero-padded sequence within the
(location, program, class) group, e.g. ``CEB-ME1801``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Protocol, Sequence

from ..core.constants import (
    COMMUNITY_ID_PATTERN,
    MAX_CLASS_NUMBER,
    MAX_ENCODABLE_CLASS_NUMBER,
    MAX_SEQUENCE,
    MIN_CLASS_NUMBER,
)
from ..core.exceptions import CapacityExceededError, InvalidClassNumberError, ValidationError

logger = logging.getLogger(__name__)

COMMUNITY_ID_RE = re.compile(COMMUNITY_ID_PATTERN)
_LOCATION_RE = re.compile(r"^[A-Z]{3}$")
_PROGRAM_RE = re.compile(r"^[A-Z]{2,4}$")

# Class and sequence each take two digits at the end of the identifier.
_DIGITS_WIDTH = 4


@dataclass(frozen=True)
class GroupKey:
    location_code: str
    program_code: str
    class_number: int

    def __str__(self) -> str:
        return f"{self.location_code}-{self.program_code} Class {self.class_number:02d}"


@dataclass(frozen=True)
class CommunityId:
    location_code: str
    program_code: str
    class_number: int
    sequence: int

    @property
    def group(self) -> GroupKey:
        return GroupKey(self.location_code, self.program_code, self.class_number)

    @property
    def value(self) -> str:
        return f"{self.location_code}-{self.program_code}{self.class_number:02d}{self.sequence:02d}"

    def __str__(self) -> str:
        return self.value


def normalize_community_id(raw: str) -> str:
    return (raw or "").strip().upper()


def is_valid_community_id(raw: str) -> bool:
    return bool(COMMUNITY_ID_RE.match(normalize_community_id(raw)))


def parse_community_id(raw: str) -> CommunityId:
    """Split an identifier by fixed widths.

    The last four characters are always ``NNSS``; everything between the dash
    and them is the program code.
    """
    value = normalize_community_id(raw)
    if not COMMUNITY_ID_RE.match(value):
        raise ValidationError(f"Invalid community ID: {raw!r}")

    location_code, rest = value.split("-", 1)
    program_code, digits = rest[:-_DIGITS_WIDTH], rest[-_DIGITS_WIDTH:]
    return CommunityId(
        location_code=location_code,
        program_code=program_code,
        class_number=int(digits[:2]),
        sequence=int(digits[2:]),
    )


def make_group_key(location_raw: str, program_raw: str, class_number: int) -> GroupKey:
    location_code = (location_raw or "").strip()[:3].upper()
    program_code = (program_raw or "").strip().upper()

    if not _LOCATION_RE.match(location_code):
        raise ValidationError("Location must start with three letters")
    if not _PROGRAM_RE.match(program_code):
        raise ValidationError("Program code must be 2 to 4 letters")
    if not MIN_CLASS_NUMBER <= int(class_number) <= MAX_CLASS_NUMBER:
        raise InvalidClassNumberError(
            f"Class number must be between {MIN_CLASS_NUMBER:02d} and {MAX_CLASS_NUMBER}"
        )
    if int(class_number) > MAX_ENCODABLE_CLASS_NUMBER:
        raise InvalidClassNumberError(
            f"Class number {class_number} does not fit the community ID format "
            f"(maximum {MAX_ENCODABLE_CLASS_NUMBER})"
        )
    return GroupKey(location_code, program_code, int(class_number))


class GroupIdentifierSource(Protocol):
    def list_group_identifiers(self, *, location_code: str, program_code: str, class_number: int) -> Sequence[str]:
        """Community ids already issued in the group, oldest first."""

        raise NotImplementedError


class IdentifierAllocator:
    """Use case: pick the next community id for a group.

    Must run inside the transaction that inserts the member row; the store's
    unique constraint on the group sequence rejects a concurrent duplicate.
    """

    def __init__(self, *, max_sequence: int = MAX_SEQUENCE):
        self._max_sequence = int(max_sequence)

    def next_sequence(self, group: GroupKey, issued: Sequence[str]) -> int:
        sequences = []
        for raw in issued:
            try:
                parsed = parse_community_id(raw)
            except ValidationError:
                logger.warning("Skipping malformed community id %r in group %s", raw, group)
                continue
            if parsed.group == group:
                sequences.append(parsed.sequence)

        next_seq = max(sequences, default=0) + 1
        if next_seq > self._max_sequence:
            raise CapacityExceededError(str(group), self._max_sequence)
        return next_seq

    def allocate(
        self,
        members: GroupIdentifierSource,
        location_raw: str,
        program_raw: str,
        class_number: int,
    ) -> CommunityId:
        group = make_group_key(location_raw, program_raw, class_number)
        issued = members.list_group_identifiers(
            location_code=group.location_code,
            program_code=group.program_code,
            class_number=group.class_number,
        )
        sequence = self.next_sequence(group, issued)
        return CommunityId(group.location_code, group.program_code, group.class_number, sequence)

from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType
from typing import Optional

from .core.constants import DEFAULT_REGISTRATION_MAX_ATTEMPTS
from .database.connection import DBConfig, DatabaseConnection
from .events.service import CheckInWindowEvaluator
from .members.identifier import IdentifierAllocator
from .members.mysql_member_repository import MySQLMemberRepository
from .members.repository import MemberRepository
from .members.service import MemberLookupService, MembershipRegistrar


@dataclass(frozen=True)
class Container:
    members_repo: MemberRepository

    registrar: MembershipRegistrar
    member_lookup: MemberLookupService
    checkin_evaluator: CheckInWindowEvaluator


def build_services(
    members_repo: MemberRepository,
    *,
    super_user_email: Optional[str] = None,
    super_user_phone: Optional[str] = None,
    max_attempts: int = DEFAULT_REGISTRATION_MAX_ATTEMPTS,
) -> Container:
    registrar = MembershipRegistrar(
        members_repo,
        allocator=IdentifierAllocator(),
        super_user_email=super_user_email,
        super_user_phone=super_user_phone,
        max_attempts=max_attempts,
    )
    return Container(
        members_repo=members_repo,
        registrar=registrar,
        member_lookup=MemberLookupService(members_repo),
        checkin_evaluator=CheckInWindowEvaluator(),
    )


def build_container(*, db_config: dict, settings: Optional[ModuleType] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    return build_services(
        MySQLMemberRepository(conn),
        super_user_email=getattr(settings, "SUPER_USER_EMAIL", None),
        super_user_phone=getattr(settings, "SUPER_USER_PHONE", None),
        max_attempts=int(getattr(settings, "REGISTRATION_MAX_ATTEMPTS", DEFAULT_REGISTRATION_MAX_ATTEMPTS)),
    )

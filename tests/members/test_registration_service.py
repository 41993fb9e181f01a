from __future__ import annotations

import threading

import pytest
from werkzeug.security import check_password_hash

from src.community_registry.community_registry.core.enums import Role
from src.community_registry.community_registry.core.exceptions import (
    CapacityExceededError,
    DuplicateContactError,
    InvalidClassNumberError,
    MissingContactError,
    SequenceCollisionError,
    TransientConflictError,
    ValidationError,
)
from src.community_registry.community_registry.members.identifier import COMMUNITY_ID_RE, parse_community_id
from src.community_registry.community_registry.members.model import RegistrationInput
from src.community_registry.community_registry.members.service import MembershipRegistrar


def make_input(**overrides) -> RegistrationInput:
    fields = dict(
        email="juan@example.org",
        phone=None,
        password="secret123",
        first_name="Juan",
        last_name="Dela Cruz",
        location="Cebu",
        program="ME",
        class_number="18",
    )
    fields.update(overrides)
    return RegistrationInput(**fields)


def test_first_account_ever_becomes_super_user(members_repo):
    svc = MembershipRegistrar(members_repo)

    first = svc.register(make_input())
    second = svc.register(make_input(email="maria@example.org"))

    assert first.account.role == Role.SUPER_USER
    assert second.account.role == Role.MEMBER
    assert first.member.community_id == "CEB-ME1801"
    assert second.member.community_id == "CEB-ME1802"


def test_designated_contact_becomes_super_user(members_repo):
    svc = MembershipRegistrar(members_repo, super_user_email=" Owner@Example.org ", super_user_phone="0917 123 4567")
    svc.register(make_input())

    by_email = svc.register(make_input(email="OWNER@example.org"))
    by_phone = svc.register(make_input(email=None, phone="+63 917-123-4567"))
    regular = svc.register(make_input(email="someone@example.org"))

    assert by_email.account.role == Role.SUPER_USER
    assert by_phone.account.role == Role.SUPER_USER
    assert regular.account.role == Role.MEMBER


def test_unset_override_never_matches(members_repo):
    svc = MembershipRegistrar(members_repo, super_user_email=None, super_user_phone="")
    svc.register(make_input())

    result = svc.register(make_input(email=None, phone="09171234567"))

    assert result.account.role == Role.MEMBER


def test_contacts_are_normalized_and_password_is_hashed(members_repo):
    result = MembershipRegistrar(members_repo).register(
        make_input(email="  Juan@Example.ORG ", phone="0917-123-4567", password="secret123")
    )

    assert result.account.email == "juan@example.org"
    assert result.account.phone == "+639171234567"
    assert result.account.password_hash != "secret123"
    assert check_password_hash(result.account.password_hash, "secret123")


def test_missing_contact_is_rejected_before_any_transaction(members_repo):
    with pytest.raises(MissingContactError):
        MembershipRegistrar(members_repo).register(make_input(email="  ", phone=None))

    assert members_repo.commits == 0
    assert members_repo.rollbacks == 0


@pytest.mark.parametrize("class_number", ["", "abc", "0", "1000", "-3", "1.5", "²"])
def test_invalid_class_number_is_rejected_before_any_transaction(members_repo, class_number):
    with pytest.raises(InvalidClassNumberError):
        MembershipRegistrar(members_repo).register(make_input(class_number=class_number))

    assert members_repo.commits == 0
    assert members_repo.rollbacks == 0


def test_short_password_is_rejected(members_repo):
    with pytest.raises(ValidationError):
        MembershipRegistrar(members_repo).register(make_input(password="123"))


def test_duplicate_email_and_phone_are_reported_without_retry(members_repo):
    svc = MembershipRegistrar(members_repo)
    svc.register(make_input(email="juan@example.org", phone="09171234567"))

    with pytest.raises(DuplicateContactError) as email_err:
        svc.register(make_input(email="JUAN@example.org", phone=None))
    with pytest.raises(DuplicateContactError) as phone_err:
        svc.register(make_input(email="other@example.org", phone="+639171234567"))

    assert email_err.value.field == "email"
    assert phone_err.value.field == "phone"
    assert members_repo.scans == 1
    assert len(members_repo.accounts) == 1


def test_two_digit_class_padding_and_leading_zero_input(members_repo):
    result = MembershipRegistrar(members_repo).register(make_input(class_number="07", program="lss", location="Manila"))

    assert result.member.community_id == "MAN-LSS0701"
    assert result.member.class_number == 7
    assert result.member.sequence == 1


def test_three_digit_class_is_rejected_before_any_transaction(members_repo):
    with pytest.raises(InvalidClassNumberError):
        MembershipRegistrar(members_repo).register(make_input(class_number="150"))

    assert members_repo.accounts == {}
    assert members_repo.members == {}
    assert members_repo.rollbacks == 0


def test_99th_member_succeeds_and_100th_fails_with_capacity_error(members_repo):
    for seq in range(1, 99):
        members_repo.seed_member(f"CEB-ME18{seq:02d}", location_code="CEB", program_code="ME", class_number=18, sequence=seq)
    svc = MembershipRegistrar(members_repo)

    ninety_ninth = svc.register(make_input(email="n99@example.org"))
    assert ninety_ninth.member.sequence == 99
    assert ninety_ninth.member.community_id == "CEB-ME1899"

    accounts_before = dict(members_repo.accounts)
    with pytest.raises(CapacityExceededError) as err:
        svc.register(make_input(email="n100@example.org"))

    assert "CEB-ME Class 18" in str(err.value)
    # The account insert was rolled back together with the failed allocation.
    assert members_repo.accounts == accounts_before


def test_other_groups_keep_their_own_sequence(members_repo):
    svc = MembershipRegistrar(members_repo)

    a = svc.register(make_input(email="a@example.org", class_number="18"))
    b = svc.register(make_input(email="b@example.org", class_number="19"))
    c = svc.register(make_input(email="c@example.org", program="FE", class_number="18"))

    assert [a.member.community_id, b.member.community_id, c.member.community_id] == [
        "CEB-ME1801",
        "CEB-ME1901",
        "CEB-FE1801",
    ]


def test_sequence_collision_is_retried_with_a_fresh_scan(members_repo):
    svc = MembershipRegistrar(members_repo)
    svc.register(make_input(email="first@example.org"))

    def concurrent_writer(unit):
        # Another registration commits sequence 02 while ours is in flight.
        members_repo.before_commit = None
        members_repo.seed_member("CEB-ME1802", location_code="CEB", program_code="ME", class_number=18, sequence=2)

    members_repo.before_commit = concurrent_writer
    result = svc.register(make_input(email="second@example.org"))

    assert result.member.community_id == "CEB-ME1803"
    assert members_repo.rollbacks == 1
    assert members_repo.scans == 3


def test_persistent_contention_surfaces_transient_conflict(members_repo):
    def always_collide(unit):
        raise SequenceCollisionError("Duplicate entry")

    members_repo.before_commit = always_collide
    svc = MembershipRegistrar(members_repo, max_attempts=5)

    with pytest.raises(TransientConflictError):
        svc.register(make_input())

    assert members_repo.scans == 5
    assert members_repo.rollbacks == 5
    assert members_repo.accounts == {}


def test_concurrent_registrations_get_distinct_sequences(members_repo):
    svc = MembershipRegistrar(members_repo, max_attempts=10)
    workers = 10
    barrier = threading.Barrier(workers)
    results = []
    errors = []
    guard = threading.Lock()

    def worker(n: int):
        barrier.wait()
        try:
            result = svc.register(make_input(email=f"member{n}@example.org"))
        except Exception as exc:  # collected and asserted below
            with guard:
                errors.append(exc)
            return
        with guard:
            results.append(result)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    ids = [r.member.community_id for r in results]
    assert len(set(ids)) == workers
    assert sorted(r.member.sequence for r in results) == list(range(1, workers + 1))
    assert all(COMMUNITY_ID_RE.match(i) for i in ids)


def test_sequences_increase_in_commit_order(members_repo):
    svc = MembershipRegistrar(members_repo)

    sequences = [svc.register(make_input(email=f"m{n}@example.org")).member.sequence for n in range(5)]

    assert sequences == [1, 2, 3, 4, 5]
    for member in members_repo.members.values():
        assert parse_community_id(member.community_id).sequence == member.sequence


def test_role_tiers_are_declared_lowest_first():
    assert [r.value for r in Role] == [
        "MEMBER",
        "CLASS_SHEPHERD",
        "MINISTRY_COORDINATOR",
        "DCS",
        "ADMINISTRATOR",
        "SUPER_USER",
    ]

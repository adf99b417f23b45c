from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError

from cocopik.models.group import Group
from cocopik.models.group_member import GroupMember
from cocopik.models.user import User
from cocopik.services import groups as group_service
from cocopik.services.identity import find_user


NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


# ---------------- is_group_expired ----------------

def test_group_without_expiry_never_expires():
    assert group_service.is_group_expired(None, now=NOW) is False
    assert group_service.is_group_expired(None, now=NOW + timedelta(days=3650)) is False


def test_group_expired_only_strictly_after_expires_at():
    expires_at = NOW
    assert group_service.is_group_expired(expires_at, now=NOW - timedelta(seconds=1)) is False
    assert group_service.is_group_expired(expires_at, now=NOW) is False
    assert group_service.is_group_expired(expires_at, now=NOW + timedelta(seconds=1)) is True


def test_naive_expiry_is_treated_as_utc():
    naive = datetime(2026, 1, 1, 12, 0)
    assert group_service.is_group_expired(naive, now=NOW + timedelta(minutes=1)) is True
    assert group_service.is_group_expired(naive, now=NOW - timedelta(minutes=1)) is False


def test_expiry_uses_current_clock(monkeypatch):
    monkeypatch.setattr(group_service, "_utc_now", lambda: NOW)
    assert group_service.is_group_expired(NOW - timedelta(hours=1)) is True
    assert group_service.is_group_expired(NOW + timedelta(hours=1)) is False


# ---------------- create_group ----------------

def test_create_group_enrolls_creator_as_only_member(db):
    group = group_service.create_group(db, device_token="creator", model_id="m1")

    assert len(group.members) == 1
    assert group.members[0].user_id == group.creator_id
    assert group.creator.device_token == "creator"
    assert group.expires_at is None
    assert len(group.invite_code) == 8


@pytest.mark.parametrize(
    "device_token, model_id",
    [(None, "m1"), ("", "m1"), ("creator", None), ("creator", "")],
)
def test_create_group_requires_token_and_model(db, device_token, model_id):
    with pytest.raises(ValueError, match="missing_fields"):
        group_service.create_group(db, device_token=device_token, model_id=model_id)
    assert db.scalar(select(func.count()).select_from(Group)) == 0


def test_create_group_computes_expiry_from_hours(db, monkeypatch):
    monkeypatch.setattr(group_service, "_utc_now", lambda: NOW)

    group = group_service.create_group(db, device_token="creator", model_id="m1", expiration_hours=1.5)

    expires_at = group.expires_at.replace(tzinfo=group.expires_at.tzinfo or timezone.utc)
    assert expires_at == NOW + timedelta(hours=1, minutes=30)


def test_zero_expiration_hours_means_no_expiry(db):
    group = group_service.create_group(db, device_token="creator", model_id="m1", expiration_hours=0)
    assert group.expires_at is None


def test_create_group_retries_when_code_taken_at_insert(db, monkeypatch):
    first = group_service.create_group(db, device_token="creator", model_id="m1")
    taken = first.invite_code

    # проверка «свободен ли код» проскочила, а вставка упёрлась в UNIQUE
    codes = iter([taken, "fresh001"])
    monkeypatch.setattr(group_service, "allocate_invite_code", lambda _db: next(codes))

    second = group_service.create_group(db, device_token="creator", model_id="m2")

    assert second.invite_code == "fresh001"
    assert db.scalar(select(func.count()).select_from(Group)) == 2
    # от неудачной попытки не осталось ни группы, ни членства
    assert db.scalar(select(func.count()).select_from(GroupMember)) == 2


def test_create_group_gives_up_after_max_attempts(db, monkeypatch):
    first = group_service.create_group(db, device_token="creator", model_id="m1")
    taken = first.invite_code
    monkeypatch.setattr(group_service, "allocate_invite_code", lambda _db: taken)

    with pytest.raises(IntegrityError):
        group_service.create_group(db, device_token="creator", model_id="m2")

    assert db.scalar(select(func.count()).select_from(Group)) == 1


def test_create_group_does_not_retry_other_integrity_errors(db, monkeypatch):
    # создатель не записан в users: INSERT в groups падает на внешнем ключе
    monkeypatch.setattr(group_service, "ensure_user", lambda _db, token: User(id="ghost", device_token=token))
    calls = []

    def _allocate(_db):
        calls.append(1)
        return f"code{len(calls):04d}"

    monkeypatch.setattr(group_service, "allocate_invite_code", _allocate)

    with pytest.raises(IntegrityError):
        group_service.create_group(db, device_token="creator", model_id="m1")

    assert len(calls) == 1
    assert db.scalar(select(func.count()).select_from(Group)) == 0


# ---------------- join_group ----------------

def test_join_group_adds_member_and_recounts(db):
    group = group_service.create_group(db, device_token="creator", model_id="m1")

    joined, member_count = group_service.join_group(db, invite_code=group.invite_code, device_token="friend")

    assert member_count == 2
    assert {m.user.device_token for m in joined.members} == {"creator", "friend"}


def test_join_group_twice_is_rejected(db):
    group = group_service.create_group(db, device_token="creator", model_id="m1")
    group_service.join_group(db, invite_code=group.invite_code, device_token="friend")

    with pytest.raises(ValueError, match="already_member"):
        group_service.join_group(db, invite_code=group.invite_code, device_token="friend")

    assert group_service.count_members(db, group.id) == 2


def test_creator_cannot_join_own_group_again(db):
    group = group_service.create_group(db, device_token="creator", model_id="m1")

    with pytest.raises(ValueError, match="already_member"):
        group_service.join_group(db, invite_code=group.invite_code, device_token="creator")


def test_unique_violation_on_join_means_already_member(db, monkeypatch):
    group = group_service.create_group(db, device_token="creator", model_id="m1")
    # быстрый путь «пропустил» существующее членство - решает UNIQUE (user_id, group_id)
    monkeypatch.setattr(group_service, "is_member", lambda *_args: False)

    with pytest.raises(ValueError, match="already_member"):
        group_service.join_group(db, invite_code=group.invite_code, device_token="creator")

    assert group_service.count_members(db, group.id) == 1


def test_join_unknown_code(db):
    with pytest.raises(ValueError, match="group_not_found"):
        group_service.join_group(db, invite_code="nope0000", device_token="friend")


def test_join_requires_device_token(db):
    group = group_service.create_group(db, device_token="creator", model_id="m1")
    with pytest.raises(ValueError, match="missing_device_token"):
        group_service.join_group(db, invite_code=group.invite_code, device_token=None)


def test_join_expired_group(db, monkeypatch):
    monkeypatch.setattr(group_service, "_utc_now", lambda: NOW)
    group = group_service.create_group(db, device_token="creator", model_id="m1", expiration_hours=1)

    monkeypatch.setattr(group_service, "_utc_now", lambda: NOW + timedelta(hours=2))
    with pytest.raises(ValueError, match="group_expired"):
        group_service.join_group(db, invite_code=group.invite_code, device_token="friend")

    assert group_service.count_members(db, group.id) == 1


def test_group_without_expiry_joinable_any_time(db, monkeypatch):
    group = group_service.create_group(db, device_token="creator", model_id="m1")
    monkeypatch.setattr(group_service, "_utc_now", lambda: NOW + timedelta(days=10000))

    _, member_count = group_service.join_group(db, invite_code=group.invite_code, device_token="friend")
    assert member_count == 2


# ---------------- чтение и списки ----------------

def test_get_group_by_code(db):
    group = group_service.create_group(db, device_token="creator", model_id="m1", title="Trip")

    found = group_service.get_group_by_code(db, group.invite_code)
    assert found.id == group.id
    assert found.title == "Trip"


def test_list_created_groups_returns_only_own_groups(db):
    mine = [
        group_service.create_group(db, device_token="alice", model_id=f"m{i}").id
        for i in range(3)
    ]
    other = group_service.create_group(db, device_token="bob", model_id="x")
    group_service.join_group(db, invite_code=other.invite_code, device_token="alice")

    created = group_service.list_created_groups(db, "alice")

    assert {g.id for g in created} == set(mine)


def test_list_joined_groups_includes_created_and_joined(db):
    own = group_service.create_group(db, device_token="alice", model_id="m1")
    other = group_service.create_group(db, device_token="bob", model_id="m2")
    group_service.join_group(db, invite_code=other.invite_code, device_token="alice")

    memberships = group_service.list_joined_groups(db, "alice")

    assert [m.group_id for m in memberships] == [own.id, other.id]


def test_listing_unknown_user_does_not_create_it(db):
    with pytest.raises(ValueError, match="user_not_found"):
        group_service.list_joined_groups(db, "ghost")
    with pytest.raises(ValueError, match="user_not_found"):
        group_service.list_created_groups(db, "ghost")
    assert find_user(db, "ghost") is None


# ---------------- каскады ----------------

def test_deleting_user_cascades_to_groups_and_memberships(db):
    group = group_service.create_group(db, device_token="alice", model_id="m1")
    group_service.join_group(db, invite_code=group.invite_code, device_token="bob")

    db.execute(delete(User).where(User.device_token == "alice"))
    db.commit()

    assert db.scalar(select(func.count()).select_from(Group)) == 0
    assert db.scalar(select(func.count()).select_from(GroupMember)) == 0
    assert find_user(db, "bob") is not None


def test_deleting_group_cascades_to_memberships(db):
    group = group_service.create_group(db, device_token="alice", model_id="m1")
    group_service.join_group(db, invite_code=group.invite_code, device_token="bob")

    db.execute(delete(Group).where(Group.id == group.id))
    db.commit()

    assert db.scalar(select(func.count()).select_from(GroupMember)) == 0
    assert db.scalar(select(func.count()).select_from(User)) == 2

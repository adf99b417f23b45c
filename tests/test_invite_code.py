import re

from cocopik.models.group import Group
from cocopik.services import invite_code
from cocopik.services.identity import ensure_user


def test_generated_codes_are_eight_lowercase_alphanumerics():
    pattern = re.compile(r"^[a-z0-9]{8}$")
    for _ in range(500):
        assert pattern.match(invite_code.generate_invite_code())


def test_alphabet_has_36_symbols():
    assert len(set(invite_code.INVITE_CODE_ALPHABET)) == 36


def test_allocate_skips_codes_already_in_use(db, monkeypatch):
    user = ensure_user(db, "tok-1")
    db.add(Group(invite_code="taken001", model_id="m1", creator_id=user.id))
    db.commit()

    candidates = iter(["taken001", "taken001", "free0001"])
    monkeypatch.setattr(invite_code, "generate_invite_code", lambda length=8: next(candidates))

    assert invite_code.allocate_invite_code(db) == "free0001"


def test_is_code_taken(db):
    user = ensure_user(db, "tok-1")
    db.add(Group(invite_code="abcd1234", model_id="m1", creator_id=user.id))
    db.commit()

    assert invite_code.is_code_taken(db, "abcd1234")
    assert not invite_code.is_code_taken(db, "zzzz9999")

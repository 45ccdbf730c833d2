from auth.service import issue_token, resolve_owner
from auth.utils import sign, unsign


def test_sign_and_unsign():
    token = sign("owner-1", "secret")
    assert unsign(token, "secret") == "owner-1"


def test_unsign_rejects_tampering():
    token = sign("owner-1", "secret")
    assert unsign(token.replace("owner-1", "owner-2"), "secret") is None
    assert unsign(token, "other-secret") is None
    assert unsign("garbage", "secret") is None
    assert unsign("", "secret") is None


def test_resolve_owner_from_valid_cookie(storage):
    ctx = resolve_owner(issue_token("owner-1"), storage)
    assert ctx.owner_id == "owner-1"
    assert ctx.cookie_existed is True


def test_resolve_owner_mints_new_id(storage):
    ctx = resolve_owner(None, storage)
    assert ctx.owner_id
    assert ctx.cookie_existed is False


def test_resolve_owner_tampered_cookie_mints_new_id(storage):
    ctx = resolve_owner("owner-1.deadbeef", storage)
    assert ctx.owner_id != "owner-1"
    assert ctx.cookie_existed is False

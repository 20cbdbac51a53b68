import pytest

from hostinit.errors import MissingIdentityError
from hostinit.utils import identity


@pytest.fixture
def users(monkeypatch):
    known = {"alice", "ops"}
    monkeypatch.setattr(identity, "user_exists", lambda n: n in known)
    return known


def test_init_username_beats_username_and_argument(users):
    ident = identity.resolve_target_identity("alice", env={"INIT_USERNAME": "ops", "USERNAME": "alice"})
    assert ident.name == "ops"
    assert ident.owner == "ops:ops"


def test_argument_used_when_environment_is_silent(users):
    assert identity.resolve_target_identity("alice", env={}).name == "alice"


def test_missing_or_unknown_user_is_fatal(users):
    with pytest.raises(MissingIdentityError):
        identity.resolve_target_identity(None, env={})
    with pytest.raises(MissingIdentityError, match="does not exist"):
        identity.resolve_target_identity("mallory", env={})


def test_invoking_identity_prefers_sudo_user():
    assert identity.resolve_invoking_identity(env={"SUDO_USER": "alice"}).name == "alice"

"""Registration and login."""

import pytest

from storefront.domain.errors import NotAuthenticated, NotFound, ValidationError
from storefront.services.user_service import UserService
from storefront.utils.security import decode_access_token


@pytest.fixture
def users(storage, notifications):
    return UserService(storage, notifications)


def test_register_hashes_password(users, notifications):
    user = users.register("meera", "Meera@Example.com", "secret123")

    assert user.email == "meera@example.com"
    assert user.password_hash != "secret123"
    assert notifications.sent[-1]["to"] == "meera@example.com"


def test_duplicate_email_or_username(users):
    users.register("meera", "meera@example.com", "secret123")

    with pytest.raises(ValidationError):
        users.register("meera2", "meera@example.com", "secret123")
    with pytest.raises(ValidationError):
        users.register("meera", "other@example.com", "secret123")


def test_login_returns_token_for_user(users):
    created = users.register("meera", "meera@example.com", "secret123")

    user, token = users.login("meera@example.com", "secret123")

    assert user.id == created.id
    assert decode_access_token(token) == created.id


def test_login_with_wrong_password(users):
    users.register("meera", "meera@example.com", "secret123")

    with pytest.raises(NotAuthenticated):
        users.login("meera@example.com", "wrong")
    with pytest.raises(NotAuthenticated):
        users.login("nobody@example.com", "secret123")


def test_get_unknown_user(users):
    with pytest.raises(NotFound):
        users.get_user(404)


def test_tampered_token_is_rejected():
    assert decode_access_token("not-a-token") is None

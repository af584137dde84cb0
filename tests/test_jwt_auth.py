import pytest

from clubify.core.exceptions import AuthenticationError
from clubify.core.jwt_auth import JWTManager


@pytest.fixture
def manager():
    return JWTManager(secret_key="unit-secret", access_token_expire_minutes=5)


def test_round_trip_user_id(manager):
    token = manager.create_access_token(42, {"scope": "mobile"})
    assert manager.get_user_id(token) == 42
    assert manager.decode_token(token)["scope"] == "mobile"


def test_expired_token(manager):
    expired = JWTManager(secret_key="unit-secret", access_token_expire_minutes=-1)
    token = expired.create_access_token(1)
    with pytest.raises(AuthenticationError, match="Token has expired"):
        manager.decode_token(token)


def test_wrong_token_type(manager):
    token = manager.create_access_token(1, {"type": "refresh_token"})
    with pytest.raises(AuthenticationError, match="Invalid token type"):
        manager.decode_token(token)


def test_non_numeric_subject(manager):
    token = manager.create_access_token(1, {"sub": "ana@clubify.mk"})
    with pytest.raises(AuthenticationError, match="Invalid token subject"):
        manager.get_user_id(token)


def test_missing_secret_rejects_everything(manager):
    token = manager.create_access_token(1)
    unconfigured = JWTManager(secret_key="")
    unconfigured.secret_key = None
    with pytest.raises(AuthenticationError):
        unconfigured.decode_token(token)

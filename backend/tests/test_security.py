from quizhub.core import security
from quizhub.core.config import Settings


def test_password_hash_roundtrip():
    h = security.get_password_hash("secret1")

    assert h != "secret1"
    assert security.verify_password("secret1", h) is True
    assert security.verify_password("secret2", h) is False
    assert security.verify_password("secret1", "not-a-bcrypt-hash") is False


def test_token_subject_roundtrip():
    token = security.create_access_token(subject="42")

    assert security.user_id_from_token(token) == 42
    assert security.user_id_from_token(None) is None
    assert security.user_id_from_token("garbage") is None


def test_expired_token_is_rejected():
    token = security.create_access_token(subject="42", extra={"exp": 1})

    assert security.safe_decode_token(token) is None
    assert security.user_id_from_token(token) is None


def test_cors_origins_accept_comma_string():
    s = Settings(BACKEND_CORS_ORIGINS="http://a.test, http://b.test")

    assert s.BACKEND_CORS_ORIGINS == ["http://a.test", "http://b.test"]

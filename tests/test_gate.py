import pytest

from errors import Unauthorized
from gate import ADMIN_PRINCIPAL, SessionGate


@pytest.fixture
def gate():
    return SessionGate("s3cret", "opaque-token")


def test_login_with_correct_password_returns_token(gate):
    assert gate.login("s3cret") == "opaque-token"


@pytest.mark.parametrize("password", ["", "S3CRET", "s3cret ", "wrong", None])
def test_login_with_any_other_password_is_unauthorized(gate, password):
    with pytest.raises(Unauthorized):
        gate.login(password)


def test_token_is_stable_across_logins(gate):
    assert gate.login("s3cret") == gate.login("s3cret")


def test_verify(gate):
    assert gate.verify("opaque-token") == ADMIN_PRINCIPAL
    for credential in (None, "", "other"):
        with pytest.raises(Unauthorized):
            gate.verify(credential)

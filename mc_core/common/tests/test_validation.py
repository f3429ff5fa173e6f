import pytest

from mc_core.common.exceptions import InputValidationError
from mc_core.common.validation import (
    require,
    sanitize_input,
    validate_email,
    validate_file_size,
    validate_password,
    validate_phone,
)


def test_email_is_trimmed_and_lowercased():
    assert validate_email("  Jane.Doe@Example.COM ") == "jane.doe@example.com"


@pytest.mark.parametrize("bad", ["", "no-at-sign", "a@b", "a b@c.com"])
def test_invalid_email_rejected(bad):
    with pytest.raises(InputValidationError) as exc:
        validate_email(bad)
    assert exc.value.details == {"field": "email"}


@pytest.mark.parametrize(
    "password, message",
    [
        ("Ab1!", "at least 8 characters"),
        ("lowercase1!", "uppercase"),
        ("UPPERCASE1!", "lowercase"),
        ("NoDigits!!", "number"),
        ("NoSpecial1", "special character"),
    ],
)
def test_password_policy(password, message):
    with pytest.raises(InputValidationError) as exc:
        validate_password(password)
    assert message in exc.value.message


def test_password_confirmation_must_match():
    assert validate_password("Secret#123", "Secret#123") == "Secret#123"
    with pytest.raises(InputValidationError) as exc:
        validate_password("Secret#123", "Secret#124")
    assert exc.value.details["field"] == "confirm_password"


def test_phone_strips_whitespace():
    assert validate_phone("+1 555 0100") == "+15550100"
    with pytest.raises(InputValidationError):
        validate_phone("0123")


def test_sanitize_and_require():
    assert sanitize_input("  <b>hi</b> ") == "bhi/b"
    with pytest.raises(InputValidationError):
        require("   ", "reason")
    assert require("x", "reason") == "x"


def test_file_size_limit():
    validate_file_size(1024, 1)
    with pytest.raises(InputValidationError):
        validate_file_size(2 * 1024 * 1024, 1)

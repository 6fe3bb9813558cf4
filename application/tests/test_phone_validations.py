import pytest
from pydantic import ValidationError

from otp_service.dto.phone_validations import validate_phone_number


@pytest.mark.parametrize("raw, expected", [
    ("306912345678", "306912345678"),
    ("+30 691 234 5678", "306912345678"),
    ("0030-691-234-5678", "306912345678"),
    ("(44) 7911 123456", "447911123456"),
])
def test_normalizes_to_digits(raw, expected):
    assert validate_phone_number(raw) == expected


@pytest.mark.parametrize("raw", ["", "1234", "12ab", "1234567890123456"])
def test_rejects_invalid_numbers(raw):
    with pytest.raises(ValidationError):
        validate_phone_number(raw)

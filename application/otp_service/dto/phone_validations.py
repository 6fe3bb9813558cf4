from pydantic import BaseModel, field_validator
import re

from otp_service.logging.utils import get_app_logger
logger = get_app_logger('phone_number_validations')

MSISDN_PATTERN = re.compile(r'^\d{8,15}$')


class PhoneNumberValidator(BaseModel):
    phone_number: str

    @field_validator('phone_number')
    @classmethod
    def validate_phone_number(cls, v):
        if not v:
            logger.error("Empty phone number")
            raise ValueError('Phone number is required')

        # Canonical MSISDN: country code + subscriber number, digits only
        cleaned = re.sub(r'[^\d]', '', v)
        if cleaned.startswith('00'):
            cleaned = cleaned[2:]

        if MSISDN_PATTERN.match(cleaned):
            return cleaned
        logger.error(f"Invalid phone number format: {v}")
        raise ValueError('Invalid phone number format. Expected 8 to 15 digits including country code')


def validate_phone_number(phone: str) -> str:
    return PhoneNumberValidator(phone_number=phone).phone_number

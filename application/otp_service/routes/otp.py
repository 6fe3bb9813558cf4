from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import ValidationError
from fastapi.exceptions import RequestValidationError

from otp_service.dto.otp import OTPResponse, ResendOTPRequest, SendOTPRequest
from otp_service.dto.phone_validations import validate_phone_number
from otp_service.logging.utils import get_app_logger
from otp_service.services.otp_service import OTPService, get_otp_service

logger = get_app_logger(__name__)

router = APIRouter(prefix="/otp", tags=["otp"])


@router.post("", response_model=OTPResponse, status_code=status.HTTP_201_CREATED)
async def send_otp(request: SendOTPRequest, otp_service: OTPService = Depends(get_otp_service)):
    """
    Issue a new OTP for the given MSISDN.
    Steps:
    1. Resolve the customer and check the number, concurrently
    2. Generate and store the OTP
    3. Notify the number over the default channel
    """
    otp = await otp_service.send(request.msisdn)
    return OTPResponse.from_schema(otp)


@router.post("/{otp_id}", response_model=OTPResponse)
async def validate_otp(
    otp_id: int,
    pin: int = Query(..., ge=0, description="6-digit PIN received by the user"),
    otp_service: OTPService = Depends(get_otp_service),
):
    """Validate a PIN; a failed attempt still counts against the attempt ceiling."""
    otp = await otp_service.validate(otp_id, pin)
    return OTPResponse.from_schema(otp)


@router.put("/{otp_id}", response_model=OTPResponse)
async def resend_otp(
    otp_id: int,
    via: List[str] = Query(..., description="Channels to resend over, e.g. SMS, EMAIL"),
    mail: Optional[str] = Query(None, description="Mail address for the EMAIL channel"),
    otp_service: OTPService = Depends(get_otp_service),
):
    """Resend the stored PIN of an ACTIVE OTP over the requested channels."""
    try:
        request = ResendOTPRequest(channels=via, mail=mail)
    except ValidationError as e:
        raise RequestValidationError(e.errors())
    otp = await otp_service.resend(otp_id, request.channels, request.mail)
    return OTPResponse.from_schema(otp)


@router.get("/{otp_id}", response_model=OTPResponse)
async def get_otp(otp_id: int, otp_service: OTPService = Depends(get_otp_service)):
    otp = await otp_service.get(otp_id)
    return OTPResponse.from_schema(otp)


@router.get("", response_model=List[OTPResponse])
async def get_otps_by_number(number: str = Query(..., description="MSISDN the OTPs were issued for"), otp_service: OTPService = Depends(get_otp_service)):
    try:
        msisdn = validate_phone_number(number)
    except ValidationError as e:
        raise RequestValidationError(e.errors())
    otps = await otp_service.get_all(msisdn)
    return [OTPResponse.from_schema(otp) for otp in otps]

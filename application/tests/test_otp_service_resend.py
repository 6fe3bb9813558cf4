"""
Tests for resend and the read operations.
"""
import pytest

from otp_service.core.constants import Channel, FaultReason, OTPStatus
from otp_service.core.exceptions import OTPException
from otp_service.dto.integrations import NotificationResultDTO

from conftest import MSISDN, PIN


class TestResend:

    @pytest.mark.asyncio
    async def test_resend_over_sms_and_email(self, otp_service, otp_repository, notification_client):
        otp = otp_repository.add()

        result = await otp_service.resend(otp.id, [Channel.SMS, Channel.EMAIL], "user@mail.com")

        assert result == otp
        assert notification_client.send_notification.await_count == 2
        calls = {call.args for call in notification_client.send_notification.await_args_list}
        assert calls == {
            (Channel.SMS, MSISDN, str(PIN)),
            (Channel.EMAIL, "user@mail.com", str(PIN)),
        }

    @pytest.mark.asyncio
    async def test_null_channels_are_skipped(self, otp_service, otp_repository, notification_client):
        otp = otp_repository.add()

        await otp_service.resend(otp.id, [None, Channel.SMS, None], None)

        notification_client.send_notification.assert_awaited_once_with(Channel.SMS, MSISDN, str(PIN))

    @pytest.mark.asyncio
    async def test_inactive_otp_is_rejected_without_dispatch(self, otp_service, otp_repository, notification_client):
        otp = otp_repository.add(status=OTPStatus.EXPIRED)

        with pytest.raises(OTPException) as exc_info:
            await otp_service.resend(otp.id, [Channel.SMS], None)

        assert exc_info.value.fault_reason == FaultReason.INVALID_STATUS
        notification_client.send_notification.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_otp_is_not_found(self, otp_service, notification_client):
        with pytest.raises(OTPException) as exc_info:
            await otp_service.resend(99, [Channel.SMS], None)

        assert exc_info.value.fault_reason == FaultReason.NOT_FOUND
        notification_client.send_notification.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_channel_does_not_fail_resend(self, otp_service, otp_repository, notification_client):
        otp = otp_repository.add()

        async def flaky(channel, destination, message):
            return NotificationResultDTO(success=channel != Channel.EMAIL, channel=channel)

        notification_client.send_notification.side_effect = flaky

        result = await otp_service.resend(otp.id, [Channel.SMS, Channel.EMAIL], "user@mail.com")

        assert result.id == otp.id
        assert notification_client.send_notification.await_count == 2

    @pytest.mark.asyncio
    async def test_resend_leaves_otp_untouched(self, otp_service, otp_repository):
        otp = otp_repository.add(attempt_count=2)

        await otp_service.resend(otp.id, [Channel.SMS], None)

        assert otp_repository.writes == []
        assert otp_repository.records[otp.id].attempt_count == 2
        assert otp_repository.records[otp.id].status == OTPStatus.ACTIVE


class TestReads:

    @pytest.mark.asyncio
    async def test_get_returns_stored_otp(self, otp_service, otp_repository):
        otp = otp_repository.add()

        first = await otp_service.get(otp.id)
        second = await otp_service.get(otp.id)

        assert first == otp
        assert first == second

    @pytest.mark.asyncio
    async def test_get_unknown_is_not_found(self, otp_service):
        with pytest.raises(OTPException) as exc_info:
            await otp_service.get(12345)

        assert exc_info.value.fault_reason == FaultReason.NOT_FOUND

    @pytest.mark.asyncio
    async def test_get_all_by_msisdn(self, otp_service, otp_repository):
        otp_repository.add()
        otp_repository.add(status=OTPStatus.VERIFIED)
        otp_repository.add(msisdn="306900000000")

        otps = await otp_service.get_all(MSISDN)

        assert len(otps) == 2
        assert all(otp.msisdn == MSISDN for otp in otps)

    @pytest.mark.asyncio
    async def test_get_all_empty_is_not_found(self, otp_service):
        with pytest.raises(OTPException) as exc_info:
            await otp_service.get_all("306900000000")

        assert exc_info.value.fault_reason == FaultReason.NOT_FOUND

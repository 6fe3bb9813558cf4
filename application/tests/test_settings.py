from otp_service.config.settings import OTPServiceConfigs


def test_debug_is_off_unless_enabled(monkeypatch):
    monkeypatch.delenv("DEBUG", raising=False)

    assert OTPServiceConfigs().DEBUG is False


def test_debug_can_be_enabled(monkeypatch):
    monkeypatch.setenv("DEBUG", "True")

    assert OTPServiceConfigs().DEBUG is True


def test_otp_defaults(monkeypatch):
    monkeypatch.delenv("OTP_VALIDITY_SECONDS", raising=False)
    monkeypatch.delenv("OTP_DEFAULT_APPLICATION_ID", raising=False)

    configs = OTPServiceConfigs()

    assert configs.OTP_VALIDITY_SECONDS == 60
    assert configs.OTP_DEFAULT_APPLICATION_ID == "PPR"

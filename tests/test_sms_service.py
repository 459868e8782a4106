import httpx
import pytest

from official.config import Settings
from official.services.sms_service import (
    SmsClient,
    SmsConfigurationError,
    SmsDeliveryError,
    UnsupportedRegionError,
    invite_message,
    verification_message,
)


async def test_send_posts_form_to_twilio(sms_client, sms_outbox):
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["request"] = request
        return sms_outbox.handler(request)

    sms_client._transport = httpx.MockTransport(handler)
    sid = await sms_client.send("1 (555) 123-4567", verification_message("1234"))

    request = captured["request"]
    assert request.method == "POST"
    assert request.url.path == "/2010-04-01/Accounts/AC00000000000000000000000000000000/Messages.json"
    assert request.headers["Authorization"].startswith("Basic ")
    assert sms_outbox.messages == [
        {"to": "+15551234567", "from": "+15550000000", "body": "Your Official verification code is: 1234"}
    ]
    assert sid.startswith("SM")


async def test_unsupported_region_never_reaches_provider(sms_client, sms_outbox):
    with pytest.raises(UnsupportedRegionError):
        await sms_client.send("+8613812345678", "hello")
    assert sms_outbox.messages == []


async def test_unconfigured_client_raises():
    client = SmsClient(account_sid=None, auth_token=None, from_number=None)
    assert not client.configured

    with pytest.raises(SmsConfigurationError):
        await client.send("+15551234567", "hello")


async def test_provider_error_status(sms_client, sms_outbox):
    sms_outbox.fail_with = 500

    with pytest.raises(SmsDeliveryError):
        await sms_client.send("+15551234567", "hello")


async def test_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = SmsClient("AC1", "token", "+15550000000", transport=httpx.MockTransport(handler))
    with pytest.raises(SmsDeliveryError):
        await client.send("+15551234567", "hello")


def test_from_settings_unwraps_secrets():
    settings = Settings(
        twilio_account_sid="AC1",
        twilio_auth_token="token",
        twilio_phone_number="+15550000000",
    )
    client = SmsClient.from_settings(settings)

    assert settings.sms_configured
    assert client.configured
    assert client.account_sid == "AC1"
    assert client.auth_token == "token"


def test_invite_message_mentions_link():
    text = invite_message("Alex", "DATING", "https://getofficial.app/invite/abc")
    assert text.startswith("Alex wants to make it official!")
    assert "dating" in text
    assert text.endswith("https://getofficial.app/invite/abc")

import logging
from typing import Optional

import httpx
from fastapi import Request

from official.config import Settings
from official.utils.phone import (
    UNSUPPORTED_COUNTRY_MESSAGE,
    is_phone_number_from_allowed_country,
    normalize_phone_number,
)

logger = logging.getLogger(__name__)


class SmsError(Exception):
    """Base class for SMS send failures."""


class UnsupportedRegionError(SmsError):
    def __init__(self, phone: str):
        super().__init__(UNSUPPORTED_COUNTRY_MESSAGE)
        self.phone = phone


class SmsConfigurationError(SmsError):
    pass


class SmsDeliveryError(SmsError):
    pass


class SmsClient:
    """
    Thin client for the Twilio Messages REST API.

    Credentials are optional at construction time so the service boots
    without them; a send attempted while unconfigured raises
    SmsConfigurationError instead.
    """

    def __init__(
        self,
        account_sid: Optional[str] = None,
        auth_token: Optional[str] = None,
        from_number: Optional[str] = None,
        api_url: str = "https://api.twilio.com/2010-04-01",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmsClient":
        return cls(
            account_sid=settings.twilio_account_sid.get_secret_value() if settings.twilio_account_sid else None,
            auth_token=settings.twilio_auth_token.get_secret_value() if settings.twilio_auth_token else None,
            from_number=settings.twilio_phone_number,
            api_url=settings.twilio_api_url,
            timeout=settings.sms_timeout,
        )

    @property
    def configured(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.from_number)

    async def send(self, to: str, body: str) -> str:
        """
        Send one SMS and return the provider message id.

        Raises:
            UnsupportedRegionError: destination is outside the allow-list
            SmsConfigurationError: credentials or sender number missing
            SmsDeliveryError: the provider could not be reached or refused the message
        """
        phone = normalize_phone_number(to)
        if not is_phone_number_from_allowed_country(phone):
            logger.error(f"Phone number {phone} is not from an allowed country")
            raise UnsupportedRegionError(phone)

        if not self.configured:
            logger.error("Twilio credentials or sender number are not configured")
            raise SmsConfigurationError("Server configuration error")

        url = f"{self.api_url}/Accounts/{self.account_sid}/Messages.json"
        data = {"To": phone, "From": self.from_number, "Body": body}

        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            try:
                response = await client.post(url, data=data, auth=(self.account_sid, self.auth_token))
            except httpx.RequestError as e:
                logger.error(f"Twilio request error for {phone}: {e}")
                raise SmsDeliveryError("Failed to send SMS") from e

        if response.status_code >= 400:
            logger.error(f"Twilio rejected SMS to {phone}. Status: {response.status_code}, body: {response.text}")
            raise SmsDeliveryError("Failed to send SMS")

        message_sid = response.json().get("sid", "")
        logger.info(f"SMS sent successfully to {phone} (sid={message_sid})")
        return message_sid


def verification_message(code: str) -> str:
    return f"Your Official verification code is: {code}"


def invite_message(sender_label: str, relationship_type: str, invite_link: str) -> str:
    return (
        f"{sender_label} wants to make it official! They've invited you to be their "
        f"{relationship_type.lower()}. Respond here: {invite_link}"
    )


def get_sms_client(request: Request) -> SmsClient:
    """Dependency returning the process-wide SMS client created at startup."""
    return request.app.state.sms_client

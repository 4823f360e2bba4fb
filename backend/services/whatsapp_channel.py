"""
Outbound WhatsApp messaging through Twilio
"""
import logging
from typing import Optional
from twilio.rest import Client

from ..models.reminder import ChannelResult
from ..utils.config import config
from ..utils.validation import format_whatsapp_address, format_whatsapp_sender, mask_phone

logger = logging.getLogger(__name__)


class WhatsAppChannel:
    """
    Twilio WhatsApp sender. Sends are not idempotent: every successful call
    is one real message, so callers must dedupe before calling send().
    """

    def __init__(self, account_sid: Optional[str] = None, auth_token: Optional[str] = None,
                 sender: Optional[str] = None, country_code: Optional[str] = None,
                 client: Optional[Client] = None):
        self.account_sid = account_sid if account_sid is not None else config.TWILIO_ACCOUNT_SID
        self.auth_token = auth_token if auth_token is not None else config.TWILIO_AUTH_TOKEN
        self.sender = sender if sender is not None else config.TWILIO_WHATSAPP_FROM
        self.country_code = country_code or config.PHONE_COUNTRY_CODE
        self._client = client

    def is_configured(self) -> bool:
        """Account SID, auth token and sending address must all be set"""
        return bool(self.account_sid and self.auth_token and self.sender)

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = Client(self.account_sid, self.auth_token)
        return self._client

    def send(self, to_phone: str, body: str) -> ChannelResult:
        """Send a WhatsApp message; provider failures are returned, not raised"""
        if not self.is_configured():
            logger.warning("⚠️ Twilio is not configured. Message not sent.")
            return ChannelResult(
                success=False,
                error="Twilio is not configured. Please set TWILIO_ACCOUNT_SID, "
                      "TWILIO_AUTH_TOKEN, and TWILIO_WHATSAPP_FROM in environment variables.",
            )

        try:
            to_address = format_whatsapp_address(to_phone, self.country_code)
            message = self.client.messages.create(
                from_=format_whatsapp_sender(self.sender),
                to=to_address,
                body=body,
            )
            logger.info(f"✅ WhatsApp message sent to {mask_phone(to_address)}: {message.sid}")
            return ChannelResult(success=True, message_id=message.sid)

        except Exception as e:
            logger.error(f"❌ Error sending WhatsApp message to {mask_phone(to_phone)}: {e}")
            return ChannelResult(success=False, error=str(e) or "Unknown error")

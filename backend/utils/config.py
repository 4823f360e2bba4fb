import os
import logging
from typing import List
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


class Config:
    """Configuration management"""

    # WhatsApp (Twilio) channel
    TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID")
    TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN")
    TWILIO_WHATSAPP_FROM = os.getenv("TWILIO_WHATSAPP_FROM")  # e.g. whatsapp:+14155238886

    # Phone numbers without a country code are treated as Egyptian
    PHONE_COUNTRY_CODE = os.getenv("PHONE_COUNTRY_CODE", "20")
    CLINIC_TIMEZONE = os.getenv("CLINIC_TIMEZONE", "Africa/Cairo")

    # Database
    DB_PATH = os.getenv("DB_PATH", "data/portal.db")

    # Reminder scheduling
    REMINDER_INTERVAL_MINUTES = int(os.getenv("REMINDER_INTERVAL_MINUTES", "5"))

    # Appointment windows, hours before the appointment: (lower, upper]
    DAY_REMINDER_WINDOW = (20.0, 25.0)
    HOUR_REMINDER_WINDOW = (0.0, 1.5)

    # Medication dose tolerance in minutes either side of the dose time
    MEDICATION_TOLERANCE_MINUTES = 5

    # File Paths
    LOGS_PATH = os.getenv("LOGS_PATH", "logs")

    @classmethod
    def missing_channel_settings(cls) -> List[str]:
        settings = {
            "TWILIO_ACCOUNT_SID": cls.TWILIO_ACCOUNT_SID,
            "TWILIO_AUTH_TOKEN": cls.TWILIO_AUTH_TOKEN,
            "TWILIO_WHATSAPP_FROM": cls.TWILIO_WHATSAPP_FROM,
        }
        return [name for name, value in settings.items() if not value]

    @classmethod
    def validate_config(cls) -> bool:
        """Validate required configuration"""
        missing = cls.missing_channel_settings()
        if missing:
            logger.warning(f"Missing WhatsApp channel settings: {', '.join(missing)}")
            return False

        if not cls.DB_PATH:
            logger.warning("DB_PATH is empty; reminder scans are disabled")
            return False

        return True

# Global config instance
config = Config()

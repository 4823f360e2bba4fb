"""Failure taxonomy for reminder scanning and notification dispatch."""


class ReminderError(Exception):
    """Base class for reminder and notification failures."""


class ConfigurationAbsent(ReminderError):
    """WhatsApp channel credentials are missing."""


class ContactNotFound(ReminderError):
    """The recipient has no phone number on file."""


class ChannelDeliveryFailure(ReminderError):
    """The messaging provider rejected or failed the send."""


class StoreUnavailable(ReminderError):
    """A read or write against the state store failed."""


class TemplateError(ReminderError):
    """Unknown message template or missing template arguments."""

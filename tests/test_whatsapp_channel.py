from unittest.mock import MagicMock

from backend.services.whatsapp_channel import WhatsAppChannel


def make_channel(client=None, **overrides):
    settings = dict(account_sid="AC123", auth_token="secret", sender="+14155238886", country_code="20")
    settings.update(overrides)
    return WhatsAppChannel(client=client, **settings)


def test_sends_to_whatsapp_addresses():
    client = MagicMock()
    client.messages.create.return_value = MagicMock(sid="SM42")

    result = make_channel(client).send("01012345678", "hello")

    assert result.success is True
    assert result.message_id == "SM42"
    client.messages.create.assert_called_once_with(
        from_="whatsapp:+14155238886",
        to="whatsapp:+201012345678",
        body="hello",
    )


def test_is_configured_needs_all_three_settings():
    assert make_channel().is_configured()
    assert not make_channel(account_sid="").is_configured()
    assert not make_channel(auth_token="").is_configured()
    assert not make_channel(sender="").is_configured()


def test_unconfigured_channel_never_calls_provider():
    client = MagicMock()
    result = make_channel(client, auth_token="").send("01012345678", "hello")

    assert result.success is False
    assert "TWILIO_AUTH_TOKEN" in result.error
    client.messages.create.assert_not_called()


def test_provider_error_is_returned_verbatim():
    client = MagicMock()
    client.messages.create.side_effect = RuntimeError("The 'To' number is not a valid phone number.")

    result = make_channel(client).send("01012345678", "hello")

    assert result.success is False
    assert result.error == "The 'To' number is not a valid phone number."


def test_unusable_phone_is_a_failure():
    client = MagicMock()
    result = make_channel(client).send("n/a", "hello")
    assert result.success is False
    client.messages.create.assert_not_called()

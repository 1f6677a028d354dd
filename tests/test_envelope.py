from __future__ import annotations

import pytest
from pydantic import ValidationError

from twitch_mqtt.broker.envelope import BrokerEnvelope


def test_lowercase_keys():
    """Test lowercase keys decode."""
    env = BrokerEnvelope.from_payload(b'{"channel": "foo", "message": "hi"}')
    assert (env.channel, env.message) == ("foo", "hi")


def test_capitalized_keys():
    """Test capitalized keys decode."""
    env = BrokerEnvelope.from_payload('{"Channel": "#foo", "Message": "hi"}')
    assert (env.channel, env.message) == ("#foo", "hi")


@pytest.mark.parametrize(
    "payload",
    [
        '{"CHANNEL": "foo", "MESSAGE": "hi"}',
        '{"cHannel": "foo", "mEssage": "hi"}',
    ],
)
def test_keys_match_any_case(payload):
    """Test channel and message keys are accepted in any letter case."""
    env = BrokerEnvelope.from_payload(payload)
    assert (env.channel, env.message) == ("foo", "hi")


def test_last_spelling_wins():
    """Test the last spelling of a repeated key wins."""
    env = BrokerEnvelope.from_payload('{"channel": "first", "Channel": "second", "message": "x"}')
    assert env.channel == "second"


def test_missing_fields_default_to_empty():
    """Test missing fields default to empty strings."""
    env = BrokerEnvelope.from_payload("{}")
    assert env.channel == ""
    assert env.message == ""


def test_unknown_keys_ignored():
    """Test unknown keys are ignored."""
    env = BrokerEnvelope.from_payload('{"channel": "foo", "message": "x", "extra": 1}')
    assert env.message == "x"


@pytest.mark.parametrize("payload", [b"not json", b"[1, 2]", b'{"channel": 5}', b""])
def test_invalid_payloads(payload):
    """Test non-JSON and wrongly typed payloads raise ValidationError."""
    with pytest.raises(ValidationError):
        BrokerEnvelope.from_payload(payload)

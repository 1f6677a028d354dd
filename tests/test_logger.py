from __future__ import annotations

import logging

import pytest

from twitch_mqtt.logs.logger import RelayLogger


@pytest.fixture
def relay_logger(caplog):
    caplog.set_level(logging.DEBUG)
    return RelayLogger(name="tests.relay")


def _messages(caplog) -> list[str]:
    return [r.getMessage() for r in caplog.records if r.name == "tests.relay"]


def test_template_rendered_with_prefix(relay_logger, caplog):
    """Test a catalogued template renders behind the user prefix."""
    relay_logger.log_event("mqtt", "subscribed", user="bot", topic="twitch/out", qos=1)
    message = _messages(caplog)[0]
    assert message.startswith("[bot" + " " * 21 + "]")
    assert "Subscribed to twitch/out at QOS 1" in message


def test_system_prefix_without_user(relay_logger, caplog):
    """Test events without a user use the system prefix."""
    relay_logger.log_event("app", "start")
    assert _messages(caplog)[0].startswith("[system")


def test_user_and_channel_prefix_truncated(relay_logger, caplog):
    """Test long user and channel prefixes are truncated."""
    relay_logger.log_event("app", "start", user="averyveryverylongnickname", channel="#chan")
    prefix = _messages(caplog)[0].split("]")[0]
    assert len(prefix) == 25


def test_unknown_event_derives_message(relay_logger, caplog):
    """Test an uncatalogued event derives its text from its name."""
    relay_logger.log_event("custom_domain", "some_action")
    assert "custom domain: some action" in _messages(caplog)[0]


def test_missing_template_field_keeps_template(relay_logger, caplog):
    """Test a template with a missing field is logged unformatted."""
    relay_logger.log_event("mqtt", "subscribed", topic="t")
    assert "{qos}" in _messages(caplog)[0]


def test_human_text_overrides_template(relay_logger, caplog):
    """Test explicit human text replaces the template."""
    relay_logger.log_event("irc", "inbound", human="> PING :x", user="bot")
    assert _messages(caplog)[0].endswith("> PING :x")


def test_level_is_respected(relay_logger, caplog):
    """Test events are logged at the requested level."""
    relay_logger.log_event("relay", "stream_ended", level=logging.DEBUG, user="bot")
    assert caplog.records[-1].levelno == logging.DEBUG


def test_debug_mode_appends_context(relay_logger, caplog):
    """Test debug mode appends the event name and context."""
    relay_logger.set_debug(True)
    relay_logger.log_event("mqtt", "subscribed", user="bot", topic="t", qos=0)
    message = _messages(caplog)[0]
    assert message.startswith("mqtt_subscribed".ljust(32))
    assert message.endswith("(topic=t, qos=0)")
    assert "user=" not in message


def test_debug_mode_truncates_long_event_names(relay_logger, caplog):
    """Test debug mode truncates long event names."""
    relay_logger.set_debug(True)
    relay_logger.log_event("relay", "a_really_long_action_name_for_testing")
    assert _messages(caplog)[0].split(" ")[0].endswith("…")


def test_set_debug_adjusts_level():
    """Test set_debug toggles the logger level."""
    relay_logger = RelayLogger(name="tests.relay.level")
    relay_logger.set_debug(True)
    assert relay_logger.logger.level == logging.DEBUG
    relay_logger.set_debug(False)
    assert relay_logger.logger.level == logging.NOTSET

from __future__ import annotations

import logging

import pytest

from tests.fixtures.relay_fakes import make_connection
from twitch_mqtt.config.config_validator import ConfigValidator, check_connection
from twitch_mqtt.errors.config import (
    BadTopicsError,
    ChannelsWithoutTopicError,
    ConfigurationError,
    EmptyChannelError,
    EmptyNickError,
    EmptyPasswordError,
    InvalidQOSError,
    NonOAuthPasswordError,
)


def test_valid_connection_passes():
    """Test a fully configured connection passes validation."""
    check_connection(make_connection())


def test_publish_only_connection_is_valid():
    """Test a publish-only connection is valid."""
    check_connection(make_connection(subscribe=None))


def test_subscribe_only_connection_is_valid():
    """Test a subscribe-only connection is valid."""
    check_connection(make_connection(publish={}, subscribe={"topic": "out", "qos": 2}))


@pytest.mark.parametrize(
    ("overrides", "error"),
    [
        ({"nick": ""}, EmptyNickError),
        ({"pass": ""}, EmptyPasswordError),
        ({"pass": "abcdef"}, NonOAuthPasswordError),
        ({"pass": "OAUTH:abcdef"}, NonOAuthPasswordError),
        ({"subscribe": {"topic": "twitch/in"}}, BadTopicsError),
        ({"publish": {}, "subscribe": {}}, BadTopicsError),
        ({"publish": {"topic": "", "channels": ["foo"]}}, ChannelsWithoutTopicError),
        ({"publish": {"topic": "t", "qos": 3, "channels": ["foo"]}}, InvalidQOSError),
        ({"subscribe": {"topic": "out", "qos": 7}}, InvalidQOSError),
        ({"publish": {"topic": "t", "channels": ["foo", ""]}}, EmptyChannelError),
    ],
)
def test_each_rule(overrides, error):
    """Test each rule raises its own error type."""
    with pytest.raises(error):
        check_connection(make_connection(**overrides))


def test_first_failing_rule_wins():
    """Test only the first broken rule is reported."""
    conn = make_connection(nick="", **{"pass": "nope", "publish": {"qos": 9}})
    with pytest.raises(EmptyNickError):
        check_connection(conn)
    conn = make_connection(**{"pass": "nope", "publish": {"qos": 9}})
    with pytest.raises(NonOAuthPasswordError):
        check_connection(conn)


def test_both_empty_topics_reported_before_channels():
    """Test missing topics are reported before missing channels."""
    conn = make_connection(publish={"channels": ["foo"]}, subscribe={})
    with pytest.raises(BadTopicsError):
        check_connection(conn)


def test_error_messages():
    """Test rule errors carry the expected messages."""
    assert str(EmptyNickError()) == "empty nick"
    assert str(NonOAuthPasswordError()) == "pass did not start with oauth:"
    assert str(BadTopicsError()) == "pub and sub topics are the same or empty"


def test_collect_errors_reports_every_invalid_entry():
    """Test every invalid connection is collected with its index."""
    connections = [
        make_connection(nick=""),
        make_connection(),
        make_connection(**{"pass": "token"}),
    ]
    failures = ConfigValidator.collect_errors(connections)
    assert [index for index, _ in failures] == [0, 2]
    assert isinstance(failures[0][1], EmptyNickError)
    assert isinstance(failures[1][1], NonOAuthPasswordError)


def test_validate_all_logs_and_raises(caplog):
    """Test validate_all logs each failure and raises ConfigurationError."""
    connections = [make_connection(nick=""), make_connection(publish={"topic": "t", "qos": 5})]
    caplog.set_level(logging.ERROR)
    with pytest.raises(ConfigurationError) as excinfo:
        ConfigValidator.validate_all(connections)
    assert len(excinfo.value.failures) == 2
    invalid = [r for r in caplog.records if "empty nick" in r.getMessage()]
    assert invalid


def test_validate_all_accepts_valid_list():
    """Test validate_all accepts a list of valid connections."""
    ConfigValidator.validate_all([make_connection(), make_connection(nick="other")])


def test_validate_all_accepts_empty_list():
    """Test validate_all accepts an empty list."""
    ConfigValidator.validate_all([])

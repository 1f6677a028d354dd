"""Bidirectional relay between Twitch chat and an MQTT broker."""

__version__ = "1.0.0"

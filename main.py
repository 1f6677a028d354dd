#!/usr/bin/env python3
"""
Main entry point for the Twitch MQTT relay
"""

import sys

from twitch_mqtt.app import main

if __name__ == "__main__":
    sys.exit(main())

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from tests.fixtures.relay_fakes import FakeBroker
from twitch_mqtt.manager.supervisor import ProcessSupervisor


@pytest.fixture
def broker() -> FakeBroker:
    return FakeBroker()


@pytest.fixture
def supervisor() -> ProcessSupervisor:
    return ProcessSupervisor(
        executable="/usr/bin/python3",
        argv=["/usr/bin/python3", "main.py"],
        env={"MQTT_BROKER": "tcp://localhost"},
        delay=1.0,
        execve=Mock(),
        exit_process=Mock(),
        sleep=AsyncMock(),
    )


@pytest.fixture
def stop_event() -> asyncio.Event:
    return asyncio.Event()

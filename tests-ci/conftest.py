"""
Pytest configuration for CI tests
Provides common fixtures: fake mpv transport, recording bus, chat messages
"""
import json
import random
from typing import Any, Dict, List, Optional, Tuple

import pytest

from core.message_types import ChatMessage
from player.errors import TransportError
from player.protocol import MpvClient


class FakeTransport:
    """Simule le socket IPC de mpv (get_property / set_property)"""

    def __init__(self, properties: Optional[Dict[str, Any]] = None):
        self.properties: Dict[str, Any] = dict(properties or {})
        self.sent: List[str] = []
        self.fail = False
        self.raw_reply: Optional[str] = None

    def send(self, payload: str) -> str:
        self.sent.append(payload)
        if self.fail:
            raise TransportError("/tmp/mpvsocket: [Errno 2] No such file or directory")
        if self.raw_reply is not None:
            return self.raw_reply

        command = json.loads(payload)["command"]
        if command[0] == "get_property":
            if command[1] in self.properties:
                return json.dumps({"data": self.properties[command[1]], "error": "success"}) + "\n"
            return json.dumps({"error": "property unavailable"}) + "\n"
        if command[0] == "set_property":
            self.properties[command[1]] = command[2]
        return json.dumps({"error": "success"}) + "\n"

    def commands(self) -> List[list]:
        return [json.loads(p)["command"] for p in self.sent]

    def set_requests(self) -> List[list]:
        return [c for c in self.commands() if c[0] == "set_property"]


class MockBus:
    """Mock MessageBus qui enregistre tout ce qui est publié"""

    def __init__(self):
        self.published: List[Tuple[str, Any]] = []

    def subscribe(self, topic, handler):
        pass

    def unsubscribe(self, topic, handler):
        pass

    async def publish(self, topic: str, message):
        self.published.append((topic, message))

    def topic(self, name: str) -> List[Any]:
        return [data for topic, data in self.published if topic == name]

    def replies(self) -> List[str]:
        return [msg.text for msg in self.topic("chat.outbound")]


class FixedRandom(random.Random):
    """randrange() toujours égal à `value` (borné par stop - 1)"""

    def __init__(self, value: int):
        super().__init__(0)
        self.value = value

    def randrange(self, start, stop=None, step=1):
        upper = start if stop is None else stop
        return min(self.value, upper - 1)


@pytest.fixture
def transport():
    return FakeTransport({"time-pos": 100.0, "duration": 3661.0, "volume": 50.0})


@pytest.fixture
def player(transport):
    return MpvClient(transport)


@pytest.fixture
def bus():
    return MockBus()


@pytest.fixture
def make_message():
    """Factory de ChatMessage"""
    def _make(text: str, user_login: str = "alice", channel: str = "test_channel") -> ChatMessage:
        return ChatMessage(channel=channel, user_login=user_login, text=text)
    return _make


@pytest.fixture
def authorized_users():
    return frozenset({"alice", "bob"})

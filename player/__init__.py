"""
Player - Pilotage de mpv via son socket IPC JSON
"""

from player.errors import PlayerError, ProtocolError, TransportError
from player.protocol import MpvClient, PropertyKind
from player.transport import SocketTransport

__all__ = [
    "MpvClient",
    "PlayerError",
    "PropertyKind",
    "ProtocolError",
    "SocketTransport",
    "TransportError",
]

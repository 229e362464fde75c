"""
Player errors raised by the IPC transport and the JSON protocol client.
"""


class PlayerError(Exception):
    """Base error for everything that talks to the player process."""


class TransportError(PlayerError):
    """Socket I/O failure (socket missing, refused, closed, timed out)."""


class ProtocolError(PlayerError):
    """Malformed JSON, either in the request we built or in the reply."""

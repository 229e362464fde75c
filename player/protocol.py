"""
Player Protocol Client - JSON IPC de mpv

Format des requêtes (un objet JSON par ligne):
    {"command": ["get_property", "time-pos"]}
    {"command": ["set_property", "pause", true]}

Format des réponses:
    {"data": 42.5, "error": "success"}

mpv peut aussi pousser des événements sur la même connexion:
    {"event": "seek"}
Ces lignes sont ignorées quand on cherche la réponse.
"""
import json
import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from player.errors import PlayerError, ProtocolError
from player.transport import SocketTransport

LOGGER = logging.getLogger(__name__)

Command = Union[str, Dict[str, Any], List[Any]]

I64_MIN = -(2 ** 63)
I64_MAX = 2 ** 63 - 1
U64_MAX = 2 ** 64 - 1


class PropertyKind(Enum):
    """Types supportés par get_property_as()"""
    INT = "int"        # entier signé 64 bits
    UINT = "uint"      # entier non signé 64 bits
    FLOAT = "float"    # flottant 64 bits
    BOOL = "bool"


def coerce_json(value: Any, kind: PropertyKind) -> Optional[Any]:
    """
    Convertit une valeur JSON décodée vers `kind`, ou None si incompatible.

    Un booléen n'est jamais un nombre; un entier est accepté comme flottant,
    un flottant n'est jamais accepté comme entier.
    """
    if kind is PropertyKind.BOOL:
        return value if isinstance(value, bool) else None

    if isinstance(value, bool):
        return None

    if kind is PropertyKind.FLOAT:
        if isinstance(value, (int, float)):
            return float(value)
        return None

    if not isinstance(value, int):
        return None

    if kind is PropertyKind.INT and I64_MIN <= value <= I64_MAX:
        return value
    if kind is PropertyKind.UINT and 0 <= value <= U64_MAX:
        return value
    return None


class MpvClient:
    """Client du protocole JSON de mpv au-dessus d'un transport requête/réponse"""

    def __init__(self, transport: Optional[SocketTransport] = None):
        self.transport = transport or SocketTransport()

    # ========================================================================
    # RAW
    # ========================================================================

    def send_command(self, command: Command) -> str:
        """
        Envoie une commande brute et retourne la réponse texte.

        Args:
            command: chaîne JSON déjà formée, objet {"command": [...]},
                     ou tableau de commande (sera enveloppé)

        Raises:
            TransportError: échec I/O
            ProtocolError: commande non sérialisable en JSON
        """
        if isinstance(command, str):
            payload = command
        else:
            if isinstance(command, list):
                command = {"command": command}
            try:
                payload = json.dumps(command)
            except (TypeError, ValueError) as e:
                raise ProtocolError(f"Cannot serialize command {command!r}: {e}") from e

        LOGGER.debug(f"➡️ mpv: {payload}")
        response = self.transport.send(payload)
        LOGGER.debug(f"⬅️ mpv: {response.strip()}")
        return response

    # ========================================================================
    # PROPERTIES
    # ========================================================================

    def set_property(self, name: str, value: Any) -> str:
        """Envoie set_property et retourne la réponse brute"""
        return self.send_command(["set_property", name, value])

    def get_property(self, name: str) -> Dict[str, Any]:
        """
        Lit une propriété et retourne l'objet réponse complet.

        Raises:
            TransportError: échec I/O
            ProtocolError: réponse absente ou JSON invalide
        """
        response = self.send_command(["get_property", name])
        return self._parse_reply(response)

    def get_property_as(self, name: str, kind: PropertyKind) -> Optional[Any]:
        """
        Lecture "best effort": None si mpv ne répond pas, si la réponse est
        invalide, si `data` est absent ou du mauvais type.
        """
        try:
            reply = self.get_property(name)
        except PlayerError as e:
            LOGGER.debug(f"get_property({name}) failed: {e}")
            return None

        if "data" not in reply:
            LOGGER.debug(f"get_property({name}) without data: {reply.get('error')}")
            return None

        return coerce_json(reply["data"], kind)

    def get_int(self, name: str) -> Optional[int]:
        return self.get_property_as(name, PropertyKind.INT)

    def get_uint(self, name: str) -> Optional[int]:
        return self.get_property_as(name, PropertyKind.UINT)

    def get_float(self, name: str) -> Optional[float]:
        return self.get_property_as(name, PropertyKind.FLOAT)

    def get_bool(self, name: str) -> Optional[bool]:
        return self.get_property_as(name, PropertyKind.BOOL)

    # ========================================================================
    # PARSING
    # ========================================================================

    @staticmethod
    def _parse_reply(response: str) -> Dict[str, Any]:
        """Retourne la première ligne JSON qui n'est pas un événement"""
        for line in response.splitlines():
            line = line.strip()
            if not line:
                continue
            try:
                obj = json.loads(line)
            except json.JSONDecodeError as e:
                raise ProtocolError(f"Invalid JSON from mpv: {line[:80]!r} ({e})") from e
            if not isinstance(obj, dict):
                raise ProtocolError(f"Unexpected JSON from mpv: {line[:80]!r}")
            if "event" in obj:
                continue
            return obj

        raise ProtocolError("No reply from mpv")

"""
🔌 IPC Transport - Socket Unix vers mpv

Envoie une requête brute sur le socket de contrôle de mpv
(--input-ipc-server) et renvoie la réponse brute.

Contrat:
    - Synchrone et bloquant: une requête = une connexion
    - La requête est terminée par un seul "\\n"
    - On lit jusqu'à une ligne complète qui n'est pas un événement (ou EOF)
    - Les octets non UTF-8 de la réponse sont ignorés, pas d'erreur
"""
import json
import logging
import socket
from pathlib import Path
from typing import Optional, Union

from player.errors import TransportError

LOGGER = logging.getLogger(__name__)

DEFAULT_SOCKET_PATH = "/tmp/mpvsocket"
RECV_CHUNK_SIZE = 4096


def has_reply_line(buffer: bytes) -> bool:
    """
    True si `buffer` contient une ligne complète autre qu'un événement.

    mpv pousse ses événements ({"event": ...}) à tous les clients connectés,
    parfois avant la réponse; une ligne qui n'est pas du JSON compte comme
    réponse (le protocole la rejettera).
    """
    *complete, _partial = buffer.split(b"\n")
    for line in complete:
        line = line.strip()
        if not line:
            continue
        try:
            obj = json.loads(line.decode("utf-8", errors="ignore"))
        except json.JSONDecodeError:
            return True
        if not (isinstance(obj, dict) and "event" in obj):
            return True
    return False


class SocketTransport:
    """Transport requête/réponse sur le socket IPC de mpv"""

    def __init__(
        self,
        socket_path: Union[str, Path] = DEFAULT_SOCKET_PATH,
        timeout: Optional[float] = None,
    ):
        """
        Args:
            socket_path: Chemin du socket (mpv --input-ipc-server=...)
            timeout: Timeout par requête en secondes (None = bloque indéfiniment)
        """
        self.socket_path = Path(socket_path)
        self.timeout = timeout

    def send(self, payload: str) -> str:
        """
        Envoie `payload` et retourne la réponse décodée.

        Raises:
            TransportError: socket absent, connexion refusée, timeout...
        """
        data = payload if payload.endswith("\n") else payload + "\n"

        try:
            with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
                sock.settimeout(self.timeout)
                sock.connect(str(self.socket_path))
                sock.sendall(data.encode("utf-8"))
                raw = self._read_reply(sock)
        except OSError as e:
            LOGGER.debug(f"IPC send failed on {self.socket_path}: {e}")
            raise TransportError(f"{self.socket_path}: {e}") from e

        return raw.decode("utf-8", errors="ignore")

    @staticmethod
    def _read_reply(sock: socket.socket) -> bytes:
        """Lit jusqu'à une ligne complète qui n'est pas un événement mpv (ou EOF)"""
        buffer = b""
        while True:
            chunk = sock.recv(RECV_CHUNK_SIZE)
            if not chunk:
                return buffer
            buffer += chunk
            if has_reply_line(buffer):
                return buffer

    def __repr__(self) -> str:
        return f"SocketTransport(socket_path={str(self.socket_path)!r}, timeout={self.timeout})"

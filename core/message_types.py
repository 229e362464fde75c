"""
📦 Message Types - DTOs pour le système de messaging

Contrats de données entre le transport chat et le dispatch des commandes.
"""
import time
from dataclasses import dataclass, field
from typing import Optional, Dict, Any

# Kind publié par le transport quand le flux chat se termine
CHAT_CLOSED = "chat.closed"


@dataclass
class ChatMessage:
    """Message entrant (PRIVMSG IRC)"""
    channel: str                    # Nom du channel (sans #)
    user_login: str                 # Login de l'émetteur, en minuscules
    text: str                       # Contenu du message
    transport: str = "irc"          # Source du message
    meta: Dict[str, Any] = field(default_factory=dict)    # Données supplémentaires

    def is_valid(self) -> bool:
        """Un émetteur et un texte vides sont impossibles côté Twitch"""
        return bool(self.user_login) and bool(self.text)


@dataclass
class OutboundMessage:
    """Message sortant (à envoyer dans le chat)"""
    channel: str                    # Nom du channel (sans #)
    text: str                       # Contenu du message
    reply_to: Optional[str] = None  # Login de l'auteur de la commande
    meta: Dict[str, Any] = field(default_factory=dict)    # Données supplémentaires


@dataclass
class SystemEvent:
    """Événement système (fin de flux, reconnect, erreurs, etc.)"""
    kind: str                       # Type: "chat.closed", "irc.reconnect", etc.
    payload: Dict[str, Any] = field(default_factory=dict)  # Données de l'événement
    timestamp: float = 0.0          # Timestamp

    def __post_init__(self):
        if self.timestamp == 0.0:
            self.timestamp = time.time()

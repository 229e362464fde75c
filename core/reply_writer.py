"""
ReplyWriter - Handle passé aux handlers pour répondre dans le chat

Publie un OutboundMessage sur chat.outbound; le throttling est fait
par le transport chat (ChatSession + RateLimiter).
"""
import logging

from core.message_bus import MessageBus
from core.message_types import ChatMessage, OutboundMessage

LOGGER = logging.getLogger(__name__)


class ReplyWriter:
    """Répond dans le channel d'où vient la commande"""

    def __init__(self, bus: MessageBus):
        self.bus = bus

    async def say(self, msg: ChatMessage, text: str) -> None:
        response = OutboundMessage(
            channel=msg.channel,
            text=text,
            reply_to=msg.user_login,
        )
        await self.bus.publish("chat.outbound", response)
        LOGGER.debug(f"💬 Reply to {msg.user_login} in #{msg.channel}: {text[:50]}")

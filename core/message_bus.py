"""
🚌 MessageBus - Pub/sub interne

Topics utilisés:
    chat.inbound      ChatMessage    (dispatcher -> ChatLogger)
    chat.outbound     OutboundMessage (ReplyWriter -> ChatSession)
    command.executed  dict           (dispatcher -> CommandLogger)
    command.failed    dict           (dispatcher -> CommandLogger)

Fire-and-forget: publish() ne bloque jamais le dispatch des commandes.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Set

LOGGER = logging.getLogger(__name__)

Handler = Callable[[Any], Awaitable[None]]


class MessageBus:
    """Bus de messages asynchrone simple (pub/sub)"""

    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}
        self._pending: Set[asyncio.Task] = set()

    def subscribe(self, topic: str, handler: Handler) -> None:
        """
        Abonne un handler async à un topic.

        Args:
            topic: Nom du topic ("chat.inbound", "chat.outbound", etc.)
            handler: Coroutine function appelée avec la donnée publiée
        """
        self._subscribers.setdefault(topic, []).append(handler)
        LOGGER.debug(f"📌 Subscriber ajouté: {topic} -> {getattr(handler, '__name__', handler)}")

    def unsubscribe(self, topic: str, handler: Handler) -> None:
        handlers = self._subscribers.get(topic, [])
        if handler in handlers:
            handlers.remove(handler)

    async def publish(self, topic: str, data: Any) -> None:
        """
        Publie un message sur un topic (fire-and-forget).

        Args:
            topic: Nom du topic
            data: Données à publier (ChatMessage, OutboundMessage, dict...)
        """
        handlers = self._subscribers.get(topic, [])
        if not handlers:
            LOGGER.debug(f"MessageBus: aucun subscriber pour {topic}")
            return

        for handler in list(handlers):
            task = asyncio.create_task(self._safe_handle(handler, data, topic))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    async def _safe_handle(self, handler: Handler, data: Any, topic: str) -> None:
        """Un subscriber qui plante ne doit pas faire tomber les autres"""
        try:
            await handler(data)
        except Exception as e:
            name = getattr(handler, "__name__", repr(handler))
            LOGGER.error(f"❌ Erreur handler {name} sur topic {topic}: {e}", exc_info=True)

    async def wait_all(self) -> None:
        """Attend que toutes les tasks en cours se terminent"""
        if self._pending:
            LOGGER.info(f"⏳ Attente de {len(self._pending)} tasks...")
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def get_stats(self) -> Dict[str, int]:
        """Retourne les stats du bus"""
        return {
            "topics": len(self._subscribers),
            "subscribers": sum(len(h) for h in self._subscribers.values()),
            "active_tasks": len(self._pending),
        }

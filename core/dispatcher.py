#!/usr/bin/env python3
"""
Command Dispatcher
Consomme le flux chat et exécute les commandes des utilisateurs autorisés.

Pipeline par message (strictement séquentiel, un message à la fois):
    1. Fin de flux (None / SystemEvent "chat.closed") -> TERMINATED
    2. Émetteur hors de la liste autorisée          -> ignoré
    3. Découpage par espaces, premier token sans "!" -> ignoré
    4. Trigger inconnu                               -> ignoré, pas de réponse
    5. Extraction de l'argument selon la règle du trigger
    6. Appel du handler (await), puis message suivant
"""
import logging
import random
import re
from dataclasses import dataclass
from enum import Enum
from typing import AbstractSet, Optional, Protocol, Union

from core.command_registry import TRIGGER_PREFIX, CommandArgs, CommandRegistry
from core.message_bus import MessageBus
from core.message_types import CHAT_CLOSED, ChatMessage, SystemEvent
from core.reply_writer import ReplyWriter

LOGGER = logging.getLogger(__name__)

# Espaces ASCII uniquement: "!play\u00a0" n'est pas "!play"
ASCII_WHITESPACE = re.compile(r"[ \t\n\f\r]+")

ChatEvent = Union[ChatMessage, SystemEvent, None]


class ChatEventSource(Protocol):
    async def next_event(self) -> ChatEvent:
        ...


class DispatchState(Enum):
    RUNNING = "running"
    TERMINATED = "terminated"


@dataclass
class CommandRequest:
    """Ce que reçoit chaque handler"""
    message: ChatMessage
    args: CommandArgs
    reply: ReplyWriter


class CommandDispatcher:
    """
    Contexte du bot: registry (lecture seule), utilisateurs autorisés
    (lecture seule) et source aléatoire (utilisée uniquement ici).
    """

    def __init__(
        self,
        registry: CommandRegistry,
        authorized_users: AbstractSet[str],
        bus: MessageBus,
        rng: Optional[random.Random] = None,
    ):
        """
        Args:
            registry: Registry des commandes (gelé ici si ce n'est pas fait)
            authorized_users: Logins autorisés, déjà en minuscules
            bus: MessageBus pour les réponses et les événements de log
            rng: Source aléatoire (injectable pour les tests)
        """
        if not registry.frozen:
            registry.freeze()

        self.registry = registry
        self.authorized_users = frozenset(authorized_users)
        self.bus = bus
        self.rng = rng or random.Random()
        self.reply = ReplyWriter(bus)
        self.state = DispatchState.RUNNING
        self.command_count = 0

    def is_authorized(self, user_login: str) -> bool:
        """Match exact: le transport doit avoir mis le login en minuscules"""
        return user_login in self.authorized_users

    async def run(self, source: ChatEventSource) -> None:
        """
        Boucle principale. Les erreurs de lecture du flux remontent à l'appelant.
        """
        LOGGER.info(f"🚀 Dispatch loop started ({len(self.authorized_users)} authorized users)")

        while self.state is DispatchState.RUNNING:
            event = await source.next_event()

            if event is None or (isinstance(event, SystemEvent) and event.kind == CHAT_CLOSED):
                self.state = DispatchState.TERMINATED
                break

            if isinstance(event, ChatMessage):
                await self.dispatch(event)
            else:
                LOGGER.debug(f"Ignoring system event: {event.kind}")

        LOGGER.info(f"🛑 Dispatch loop terminated after {self.command_count} commands")

    async def dispatch(self, msg: ChatMessage) -> bool:
        """
        Traite un message chat.

        Returns:
            True si un handler a été exécuté
        """
        if not msg.is_valid():
            LOGGER.error(f"❌ Invalid chat event (empty sender or text): {msg!r}")
            return False

        await self.bus.publish("chat.inbound", msg)

        if not self.is_authorized(msg.user_login):
            return False

        tokens = iter(token for token in ASCII_WHITESPACE.split(msg.text) if token)
        trigger = next(tokens, None)
        if trigger is None or not trigger.startswith(TRIGGER_PREFIX):
            return False

        entry = self.registry.resolve(trigger)
        if entry is None:
            LOGGER.debug(f"Unknown command: {trigger}")
            return False

        args = entry.rule.extract(tokens, self.rng)
        LOGGER.info(f"🤖 Command: {trigger} {args.value if not args.is_none else ''} from {msg.user_login}")

        event = {
            "command": trigger[len(TRIGGER_PREFIX):],
            "user": msg.user_login,
            "channel": msg.channel,
            "args": args.value,
        }

        try:
            await entry.handler(CommandRequest(message=msg, args=args, reply=self.reply))
        except Exception as e:
            LOGGER.error(f"❌ Handler {trigger} failed: {e}", exc_info=True)
            await self.bus.publish("command.failed", {**event, "error": str(e)})
            return True

        self.command_count += 1
        await self.bus.publish("command.executed", {**event, "result": "success"})
        return True

#!/usr/bin/env python3
"""
🔌 IRC Client Twitch pour le bot mpv
Utilise pydle pour se connecter à l'IRC Twitch:
- Rejoint le channel configuré
- Pousse chaque PRIVMSG dans une file lue par le dispatcher (next_event)
- Écoute chat.outbound -> envoie via IRC, throttlé par RateLimiter
"""

import asyncio
import logging
from typing import Optional, Union

import pydle

from core.config import BotConfig
from core.message_bus import MessageBus
from core.message_types import CHAT_CLOSED, ChatMessage, OutboundMessage, SystemEvent
from core.rate_limiter import RateLimiter

LOGGER = logging.getLogger(__name__)

TWITCH_IRC_HOST = "irc.chat.twitch.tv"
TWITCH_IRC_PORT_TLS = 6697
CAPS = "CAP REQ :twitch.tv/membership twitch.tv/tags twitch.tv/commands"

ChatEvent = Union[ChatMessage, SystemEvent]


class TwitchChatClient(pydle.Client):
    """Client IRC Twitch: join du channel et remontée des messages"""

    def __init__(self, nickname: str, channel: str, events: "asyncio.Queue[ChatEvent]", **kwargs):
        super().__init__(nickname, **kwargs)
        self.channel = channel
        self.events = events
        self.ready = False
        self.lost_reason: Optional[str] = None

    async def on_connect(self):
        """Connexion établie - demander capabilities et join du channel"""
        await super().on_connect()
        LOGGER.info("🔌 IRC connecté à Twitch")

        await self.raw(CAPS + "\r\n")

        # Join best-effort: un échec est loggé, la boucle démarre quand même
        try:
            await self.join(f"#{self.channel}")
            LOGGER.info(f"✅ Successfully joined #{self.channel}")
        except Exception as e:
            LOGGER.error(f"❌ Failed to join '#{self.channel}': {e}")

        self.ready = True

    async def on_channel_message(self, target, by, message):
        """PRIVMSG sur un channel -> file d'événements"""
        await super().on_channel_message(target, by, message)

        login = (by or "").lower()
        if login == self.nickname.lower():
            return

        await self.events.put(ChatMessage(
            channel=target.lstrip("#").lower(),
            user_login=login,
            text=message or "",
        ))

    async def on_disconnect(self, expected):
        """
        Déconnexion IRC.

        Inattendue: pydle tente de se reconnecter (RECONNECT_MAX_ATTEMPTS).
        S'il abandonne, ou si la reconnexion échoue, le flux chat est
        terminé et la boucle de dispatch s'arrête.
        """
        self.ready = False
        if expected:
            await super().on_disconnect(expected)
            LOGGER.info("🔌 IRC déconnecté proprement")
            await self.events.put(SystemEvent(kind=CHAT_CLOSED, payload={"expected": True}))
            return

        LOGGER.warning("⚠️ IRC déconnecté de manière inattendue (reconnexion pydle)")
        reason = "reconnect attempts exhausted"
        try:
            await super().on_disconnect(expected)
        except OSError as e:
            reason = f"reconnect failed: {e}"

        if self.connected:
            LOGGER.info("🔌 IRC reconnecté")
            return

        LOGGER.error(f"❌ IRC perdu définitivement ({reason}), arrêt du dispatch")
        self.lost_reason = reason
        await self.events.put(SystemEvent(kind=CHAT_CLOSED, payload={"expected": False, "reason": reason}))


class ChatSession:
    """
    Session chat complète: connexion, file d'événements entrants,
    file d'envoi throttlée.
    """

    def __init__(
        self,
        config: BotConfig,
        bus: MessageBus,
        rate_limiter: Optional[RateLimiter] = None,
        ready_timeout: float = 5.0,
    ):
        self.config = config
        self.bus = bus
        self.rate_limiter = rate_limiter or RateLimiter(per30=config.max_msgs_per_30s)
        self.ready_timeout = ready_timeout

        self.events: "asyncio.Queue[ChatEvent]" = asyncio.Queue()
        self._send_q: "asyncio.Queue[OutboundMessage]" = asyncio.Queue()
        self.client: Optional[TwitchChatClient] = None
        self._sender_task: Optional[asyncio.Task] = None

        self.bus.subscribe("chat.outbound", self._handle_outbound_message)

    async def start(self) -> None:
        """Connexion à l'IRC Twitch et attente du join (max ready_timeout)"""
        if self.client:
            LOGGER.warning("⚠️ IRC déjà démarré")
            return

        LOGGER.info(f"🚀 Démarrage IRC client: {self.config.bot_username} sur #{self.config.channel}")

        self.client = TwitchChatClient(
            nickname=self.config.bot_username,
            channel=self.config.channel,
            events=self.events,
            realname="mpv chat remote",
        )
        await self.client.connect(
            hostname=TWITCH_IRC_HOST,
            port=TWITCH_IRC_PORT_TLS,
            tls=True,
            password=self.config.oauth_token,
        )

        self._sender_task = asyncio.create_task(self._sender_loop())

        steps = int(self.ready_timeout / 0.1)
        for _ in range(steps):
            if self.client.ready:
                LOGGER.info("✅ IRC client prêt !")
                return
            await asyncio.sleep(0.1)

        LOGGER.warning("⚠️ IRC client démarré mais pas encore prêt")

    async def next_event(self) -> ChatEvent:
        """Prochain événement chat (bloque jusqu'à réception)"""
        return await self.events.get()

    async def _handle_outbound_message(self, msg: OutboundMessage) -> None:
        await self._send_q.put(msg)

    async def _sender_loop(self) -> None:
        while True:
            msg = await self._send_q.get()

            while not self.rate_limiter.can_send(msg.channel):
                await asyncio.sleep(self.rate_limiter.time_until_available(msg.channel) + 0.05)

            if not self.client or not self.client.ready:
                LOGGER.error(f"❌ IRC pas prêt - message perdu: {msg.text[:50]}")
                continue

            try:
                await self.client.message(f"#{msg.channel}", msg.text)
                LOGGER.info(f"📤 IRC sent to #{msg.channel}: {msg.text}")
            except Exception as e:
                LOGGER.error(f"❌ Erreur envoi IRC à #{msg.channel}: {e}")

    async def stop(self) -> None:
        """Arrêter le client IRC proprement"""
        self.bus.unsubscribe("chat.outbound", self._handle_outbound_message)

        if self._sender_task:
            self._sender_task.cancel()
            try:
                await self._sender_task
            except asyncio.CancelledError:
                pass
            self._sender_task = None

        if self.client:
            LOGGER.info("🛑 Arrêt IRC client...")
            if self.client.connected:
                await self.client.quit("Bot shutdown")
            self.client = None

        LOGGER.info("✅ IRC client arrêté")

    @property
    def is_ready(self) -> bool:
        return self.client is not None and self.client.ready

    @property
    def lost_reason(self) -> Optional[str]:
        """Raison de la perte définitive du chat (None si fermeture normale)"""
        return self.client.lost_reason if self.client else None

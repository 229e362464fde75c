#!/usr/bin/env python3
"""
Chat Logger
Logs all chat messages seen by the dispatcher to a dedicated chat.log file
"""

import logging
import os
from typing import Mapping, Optional

from core.message_bus import MessageBus
from core.message_types import ChatMessage

LOGGER = logging.getLogger(__name__)


def dedicated_logger(name: str, log_file: Optional[str]) -> Optional[logging.Logger]:
    """Logger non propagé écrivant dans son propre fichier (None si pas de fichier)"""
    if not log_file:
        return None

    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    logger.propagate = False  # Don't send to root logger

    # Un seul FileHandler par fichier, même si le logger est recréé
    path = os.path.abspath(log_file)
    for existing in logger.handlers:
        if isinstance(existing, logging.FileHandler) and existing.baseFilename == path:
            return logger

    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s %(message)s"))
    logger.addHandler(handler)
    return logger


class ChatLogger:
    """
    Subscriber that logs all chat.inbound messages to dedicated chat.log
    Separate from instance.log for easier chat analysis
    """

    def __init__(self, bus: MessageBus, log_paths: Mapping[str, str]):
        """
        Args:
            bus: MessageBus pour subscribe
            log_paths: Chemins produits par setup_logging() (clé 'chat')
        """
        self.bus = bus
        self.message_count = 0

        chat_log_file = log_paths.get("chat")
        self.chat_file_logger = dedicated_logger("chat_messages", chat_log_file)
        if self.chat_file_logger:
            LOGGER.info(f"📝 Chat logging to: {chat_log_file}")
        else:
            LOGGER.info("📝 Chat logging to main log (no dedicated file)")

        self.bus.subscribe("chat.inbound", self._handle_chat_message)

    async def _handle_chat_message(self, msg: ChatMessage) -> None:
        self.message_count += 1
        line = f"[#{msg.channel}] {msg.user_login}: {msg.text}"

        if self.chat_file_logger:
            self.chat_file_logger.info(line)
        else:
            LOGGER.debug(line)

    def get_message_count(self) -> int:
        """Retourne le nombre de messages reçus"""
        return self.message_count

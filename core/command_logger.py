#!/usr/bin/env python3
"""
Command Logger
Logs all command executions to dedicated commands.log file
"""

import logging
from typing import Mapping

from core.chat_logger import dedicated_logger
from core.message_bus import MessageBus

LOGGER = logging.getLogger(__name__)


class CommandLogger:
    """
    Audit des commandes exécutées (qui, quoi, quel argument, résultat).
    Séparé de instance.log.
    """

    def __init__(self, bus: MessageBus, log_paths: Mapping[str, str]):
        self.bus = bus
        self.command_count = 0
        self.failure_count = 0

        cmd_log_file = log_paths.get("commands")
        self.cmd_file_logger = dedicated_logger("command_executions", cmd_log_file)
        if self.cmd_file_logger:
            LOGGER.info(f"⚡ Command logging to: {cmd_log_file}")

        self.bus.subscribe("command.executed", self._handle_command_executed)
        self.bus.subscribe("command.failed", self._handle_command_failed)

    @staticmethod
    def _describe(data: dict) -> str:
        args = data.get("args")
        args_str = "(no args)" if args is None else str(args)
        return f"[#{data.get('channel', 'unknown')}] {data.get('user', 'anonymous')} → !{data.get('command', 'unknown')} {args_str}"

    async def _handle_command_executed(self, data: dict) -> None:
        self.command_count += 1
        line = f"✅ {self._describe(data)} | {data.get('result', 'success')}"
        if self.cmd_file_logger:
            self.cmd_file_logger.info(line)
        else:
            LOGGER.debug(line)

    async def _handle_command_failed(self, data: dict) -> None:
        self.failure_count += 1
        line = f"❌ {self._describe(data)} | ERROR: {data.get('error', 'unknown error')}"
        if self.cmd_file_logger:
            self.cmd_file_logger.warning(line)
        else:
            LOGGER.warning(line)

    def get_command_count(self) -> int:
        """Returns number of commands logged"""
        return self.command_count

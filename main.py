#!/usr/bin/env python3
"""
mpv chat remote - Pilotage de mpv depuis le chat Twitch

Les utilisateurs autorisés envoient !play, !pause, !rewind, !forward, !pos,
!sub, !aud, !vol, !joke dans le chat; chaque commande devient une requête
JSON envoyée au socket IPC de mpv (mpv --input-ipc-server=/tmp/mpvsocket).
"""

import argparse
import asyncio
import logging
import pathlib
import sys
from typing import Dict

from commands.registry import build_command_registry
from core.chat_logger import ChatLogger
from core.command_logger import CommandLogger
from core.config import DEFAULT_CONFIG_PATH, BotConfig, ConfigError, load_config
from core.dispatcher import CommandDispatcher
from core.message_bus import MessageBus
from core.rate_limiter import RateLimiter
from player.protocol import MpvClient
from player.transport import SocketTransport

LOGGER = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command-line arguments"""
    parser = argparse.ArgumentParser(description="mpv chat remote - Twitch chat -> mpv IPC")
    parser.add_argument(
        '--config',
        type=str,
        default=DEFAULT_CONFIG_PATH,
        help=f'Path to config file (default: {DEFAULT_CONFIG_PATH}, optional)'
    )
    parser.add_argument(
        '--env-file',
        type=str,
        default='.env',
        help='Path to .env file (default: .env, optional)'
    )
    parser.add_argument(
        '--log-dir',
        type=str,
        default=None,
        help='Logs directory (default: logging.dir from config, or logs/)'
    )
    parser.add_argument(
        '--log-level',
        type=str,
        default=None,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Log level (default: logging.level from config, or INFO)'
    )
    return parser.parse_args(argv)


def setup_logging(log_dir: str = "logs", level: str = "INFO") -> Dict[str, str]:
    """
    Setup logging structure

    Structure:
        logs/
        ├── instance.log     (main bot logs, startup, errors)
        ├── chat.log         (all chat messages seen)
        └── commands.log     (command executions)
    """
    logs_base = pathlib.Path(log_dir)
    logs_base.mkdir(parents=True, exist_ok=True)

    log_paths = {
        'instance': str(logs_base / "instance.log"),
        'chat': str(logs_base / "chat.log"),
        'commands': str(logs_base / "commands.log"),
    }

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-8s %(name)s %(message)s",
        handlers=[
            logging.FileHandler(log_paths['instance'], encoding="utf-8"),
            logging.StreamHandler()
        ],
        force=True  # Override any existing config
    )

    return log_paths


async def run_bot(config: BotConfig, log_paths: Dict[str, str]) -> None:
    """Wiring des composants puis boucle de dispatch jusqu'à la fin du flux chat"""
    # Import local: pydle n'est nécessaire que pour la vraie session chat
    from twitch.irc_client import ChatSession

    bus = MessageBus()
    ChatLogger(bus, log_paths)
    CommandLogger(bus, log_paths)

    player = MpvClient(SocketTransport(config.socket_path, timeout=config.ipc_timeout))
    registry = build_command_registry(player)
    dispatcher = CommandDispatcher(registry, config.authorized_users, bus)

    session = ChatSession(config, bus, RateLimiter(per30=config.max_msgs_per_30s))

    LOGGER.info(f"🚀 Bot démarré | #{config.channel} | mpv socket: {config.socket_path}")
    await session.start()

    try:
        await dispatcher.run(session)
        if session.lost_reason:
            raise ConnectionError(f"Chat session lost: {session.lost_reason}")
    finally:
        LOGGER.info("Arret...")
        await session.stop()
        await bus.wait_all()
        LOGGER.info("Termine")


def main(argv=None) -> int:
    args = parse_args(argv)

    try:
        config = load_config(args.config, args.env_file)
    except ConfigError as e:
        setup_logging(args.log_dir or "logs", args.log_level or "INFO")
        LOGGER.error(f"❌ Configuration invalide: {e}")
        return 1

    log_paths = setup_logging(args.log_dir or config.log_dir, args.log_level or config.log_level)

    try:
        asyncio.run(run_bot(config, log_paths))
    except KeyboardInterrupt:
        LOGGER.info("CTRL+C détecté, arrêt")
    except Exception as e:
        LOGGER.error(f"Erreur fatale: {e}", exc_info=True)
        return 1
    return 0


def run() -> None:
    """Console script entry point"""
    sys.exit(main())


if __name__ == "__main__":
    run()

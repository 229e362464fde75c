"""
Registry central pour toutes les commandes du bot.
Chaque trigger est lié à son handler et à sa règle d'argument, une seule fois.
"""
import logging
from typing import Optional, Sequence

from core.command_registry import CommandRegistry, NoArgument, RandomIndex, U16Argument
from player.protocol import MpvClient

from .jokes import JOKES
from .player_commands import (
    handle_aud,
    handle_forward,
    handle_joke,
    handle_pause,
    handle_play,
    handle_pos,
    handle_rewind,
    handle_sub,
    handle_vol,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_SEEK_SECONDS = 10
DEFAULT_TRACK = 0  # 0 = piste désactivée pour mpv


def register_player_commands(registry: CommandRegistry, player: MpvClient) -> None:
    """
    Commandes de contrôle de mpv.
    """
    async def cmd_play(request):
        await handle_play(player, request)

    async def cmd_pause(request):
        await handle_pause(player, request)

    async def cmd_rewind(request):
        await handle_rewind(player, request)

    async def cmd_forward(request):
        await handle_forward(player, request)

    async def cmd_pos(request):
        await handle_pos(player, request)

    async def cmd_sub(request):
        await handle_sub(player, request)

    async def cmd_aud(request):
        await handle_aud(player, request)

    async def cmd_vol(request):
        await handle_vol(player, request)

    registry.register("!play", cmd_play, NoArgument())
    registry.register("!pause", cmd_pause, NoArgument())
    registry.register("!rewind", cmd_rewind, U16Argument(default=DEFAULT_SEEK_SECONDS))
    registry.register("!forward", cmd_forward, U16Argument(default=DEFAULT_SEEK_SECONDS))
    registry.register("!pos", cmd_pos, NoArgument())
    registry.register("!sub", cmd_sub, U16Argument(default=DEFAULT_TRACK))
    registry.register("!aud", cmd_aud, U16Argument(default=DEFAULT_TRACK))
    registry.register("!vol", cmd_vol, U16Argument(default=None))

    LOGGER.info("✅ Player commands registered: play, pause, rewind, forward, pos, sub, aud, vol")


def register_fun_commands(registry: CommandRegistry, jokes: Sequence[str] = JOKES) -> None:
    """
    Commandes sans lien avec le lecteur.
    """
    async def cmd_joke(request):
        await handle_joke(jokes, request)

    registry.register("!joke", cmd_joke, RandomIndex(len(jokes)))

    LOGGER.info(f"✅ Fun commands registered: joke ({len(jokes)} jokes)")


def build_command_registry(player: MpvClient, jokes: Optional[Sequence[str]] = None) -> CommandRegistry:
    """
    Enregistre TOUTES les commandes du bot et gèle le registry.
    Appeler cette fonction unique dans main.py.
    """
    registry = CommandRegistry()
    register_player_commands(registry, player)
    register_fun_commands(registry, JOKES if jokes is None else jokes)
    registry.freeze()
    return registry

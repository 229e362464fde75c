"""
🎬 Player Commands
Commandes de contrôle de mpv pour les utilisateurs autorisés.

Commands:
- !play / !pause : reprise / pause
- !rewind [s=10] / !forward [s=10] : recul / avance relative
- !pos : position courante "écoulé / total (restant remaining)"
- !sub [n=0] / !aud [n=0] : piste de sous-titres / audio (0 = désactivé)
- !vol [pct] : lit ou règle le volume
- !joke : une blague

Les échecs IPC ne remontent jamais: soit l'action est ignorée en silence,
soit un court message d'erreur part dans le chat (!vol).
"""
import logging
from typing import TYPE_CHECKING, Callable, Sequence

from core.formatting import format_number, format_time
from player.errors import PlayerError, TransportError

if TYPE_CHECKING:
    from core.dispatcher import CommandRequest
    from player.protocol import MpvClient

LOGGER = logging.getLogger(__name__)

VOLUME_UNAVAILABLE = "(failed to get volume information)"


async def handle_play(player: "MpvClient", request: "CommandRequest") -> None:
    """!play - reprend la lecture"""
    _set_quietly(player, "pause", False)


async def handle_pause(player: "MpvClient", request: "CommandRequest") -> None:
    """!pause - met en pause"""
    _set_quietly(player, "pause", True)


def make_offset_handler(sign: int) -> Callable:
    """
    Fabrique le handler de !forward (sign=+1) ou !rewind (sign=-1).

    Nouvelle position = time-pos + sign * secondes. Si time-pos est illisible
    (rien en lecture, mpv fermé), la commande ne fait rien.
    """
    if sign not in (1, -1):
        raise ValueError("sign must be +1 or -1")

    async def handle_offset(player: "MpvClient", request: "CommandRequest") -> None:
        if request.args.is_none:
            return

        time_pos = player.get_float("time-pos")
        if time_pos is None:
            return

        _set_quietly(player, "time-pos", time_pos + sign * float(request.args.value))

    handle_offset.__name__ = "handle_forward" if sign > 0 else "handle_rewind"
    return handle_offset


handle_forward = make_offset_handler(+1)
handle_rewind = make_offset_handler(-1)


async def handle_pos(player: "MpvClient", request: "CommandRequest") -> None:
    """!pos - position courante, ignorée si time-pos ou duration est illisible"""
    time_pos = player.get_float("time-pos")
    if time_pos is None:
        return

    duration = player.get_float("duration")
    if duration is None:
        return

    elapsed = max(0, int(time_pos))
    total = max(0, int(duration))
    remaining = max(0, int(duration - time_pos))

    await request.reply.say(
        request.message,
        f"{format_time(elapsed)} / {format_time(total)} ({format_time(remaining)} remaining)",
    )


async def handle_sub(player: "MpvClient", request: "CommandRequest") -> None:
    """!sub [n] - piste de sous-titres (0 = aucune)"""
    if not request.args.is_none:
        _set_quietly(player, "sid", request.args.value)


async def handle_aud(player: "MpvClient", request: "CommandRequest") -> None:
    """!aud [n] - piste audio"""
    if not request.args.is_none:
        _set_quietly(player, "aid", request.args.value)


async def handle_vol(player: "MpvClient", request: "CommandRequest") -> None:
    """
    !vol <pct> règle le volume et confirme.
    !vol seul répond avec le volume actuel.
    """
    if request.args.is_none:
        volume = player.get_float("volume")
        text = VOLUME_UNAVAILABLE if volume is None else f"volume: {format_number(volume)}%"
        await request.reply.say(request.message, text)
        return

    volume = request.args.value
    try:
        player.set_property("volume", volume)
    except TransportError as e:
        LOGGER.warning(f"⚠️ [vol] set volume {volume} failed: {e}")
        text = f"failed to set volume: {e}"
    else:
        text = f"(volume has been set to {volume}%)"

    await request.reply.say(request.message, text)


async def handle_joke(jokes: Sequence[str], request: "CommandRequest") -> None:
    """!joke - l'index a déjà été tiré par le dispatcher"""
    if request.args.is_none or not 0 <= request.args.value < len(jokes):
        return
    await request.reply.say(request.message, jokes[request.args.value])


def _set_quietly(player: "MpvClient", name: str, value) -> None:
    try:
        player.set_property(name, value)
    except PlayerError as e:
        LOGGER.debug(f"set_property({name}, {value}) ignored: {e}")

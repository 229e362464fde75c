"""
🗂️ Command Registry - Trigger -> handler + règle d'extraction d'argument

Chaque trigger ("!rewind", "!vol"...) est lié une seule fois, au démarrage,
à un handler async et à la règle qui transforme le reste du message en
CommandArgs. Le registry est gelé avant d'entrer dans la boucle de dispatch.
"""
import logging
import random
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Awaitable, Callable, Dict, Iterator, List, Optional

if TYPE_CHECKING:
    from core.dispatcher import CommandRequest

LOGGER = logging.getLogger(__name__)

TRIGGER_PREFIX = "!"
U16_MAX = 0xFFFF

_U16_TOKEN = re.compile(r"\+?[0-9]+")

CommandHandler = Callable[["CommandRequest"], Awaitable[None]]


# ============================================================================
# ARGUMENTS
# ============================================================================

@dataclass(frozen=True)
class CommandArgs:
    """Argument extrait d'une commande: un entier 16 bits non signé, ou rien."""
    value: Optional[int] = None

    @classmethod
    def u16(cls, value: int) -> "CommandArgs":
        if not 0 <= value <= U16_MAX:
            raise ValueError(f"{value} does not fit in an unsigned 16-bit integer")
        return cls(value)

    @property
    def is_none(self) -> bool:
        return self.value is None


NO_ARGS = CommandArgs()


def parse_u16(token: Optional[str]) -> Optional[int]:
    """"42" -> 42, "+7" -> 7; None pour "-1", "abc", "70000", "4.5"... """
    if token is None or not _U16_TOKEN.fullmatch(token):
        return None
    # int() refuse les chaînes de plus de 4300 chiffres
    digits = token.lstrip("+").lstrip("0") or "0"
    if len(digits) > len(str(U16_MAX)):
        return None
    value = int(digits)
    return value if value <= U16_MAX else None


class ArgumentRule:
    """Transforme les tokens restants d'un message en CommandArgs."""

    def extract(self, tokens: Iterator[str], rng: random.Random) -> CommandArgs:
        raise NotImplementedError


class NoArgument(ArgumentRule):
    """Aucun token consommé"""

    def extract(self, tokens: Iterator[str], rng: random.Random) -> CommandArgs:
        return NO_ARGS

    def __repr__(self) -> str:
        return "NoArgument()"


class U16Argument(ArgumentRule):
    """
    Premier token parsé en u16; `default` si absent ou invalide.
    Avec default=None le handler reçoit NO_ARGS et choisit son comportement.
    """

    def __init__(self, default: Optional[int] = None):
        if default is not None and not 0 <= default <= U16_MAX:
            raise ValueError(f"default {default} is not an unsigned 16-bit integer")
        self.default = default

    def extract(self, tokens: Iterator[str], rng: random.Random) -> CommandArgs:
        value = parse_u16(next(tokens, None))
        if value is None:
            value = self.default
        return NO_ARGS if value is None else CommandArgs.u16(value)

    def __repr__(self) -> str:
        return f"U16Argument(default={self.default})"


class RandomIndex(ArgumentRule):
    """Index tiré uniformément dans [0, count), aucun token consommé"""

    def __init__(self, count: int):
        if not 0 < count <= U16_MAX + 1:
            raise ValueError(f"count must be in 1..{U16_MAX + 1}, got {count}")
        self.count = count

    def extract(self, tokens: Iterator[str], rng: random.Random) -> CommandArgs:
        return CommandArgs.u16(rng.randrange(self.count))

    def __repr__(self) -> str:
        return f"RandomIndex(count={self.count})"


# ============================================================================
# REGISTRY
# ============================================================================

@dataclass(frozen=True)
class CommandEntry:
    trigger: str
    handler: CommandHandler
    rule: ArgumentRule


class CommandRegistry:
    """Table trigger -> CommandEntry, écrite au démarrage puis en lecture seule"""

    def __init__(self):
        self._commands: Dict[str, CommandEntry] = {}
        self._frozen = False

    def register(
        self,
        trigger: str,
        handler: CommandHandler,
        rule: Optional[ArgumentRule] = None,
    ) -> None:
        """
        Enregistre une commande.

        Args:
            trigger: Trigger complet, préfixe compris (ex: "!rewind")
            handler: Coroutine function qui reçoit un CommandRequest
            rule: Règle d'extraction d'argument (NoArgument par défaut)

        Raises:
            RuntimeError: registry déjà gelé
            ValueError: trigger invalide ou déjà enregistré
        """
        if self._frozen:
            raise RuntimeError(f"Registry is frozen, cannot register {trigger}")
        if not trigger.startswith(TRIGGER_PREFIX) or len(trigger) == 1 or any(c.isspace() for c in trigger):
            raise ValueError(f"Invalid trigger: {trigger!r}")
        if trigger in self._commands:
            raise ValueError(f"Trigger already registered: {trigger}")

        self._commands[trigger] = CommandEntry(trigger, handler, rule or NoArgument())
        LOGGER.debug(f"Registered command: {trigger} ({self._commands[trigger].rule!r})")

    def freeze(self) -> None:
        self._frozen = True
        LOGGER.info(f"✅ {len(self._commands)} commands registered: {' '.join(self.triggers())}")

    @property
    def frozen(self) -> bool:
        return self._frozen

    def resolve(self, trigger: str) -> Optional[CommandEntry]:
        """Match exact et sensible à la casse"""
        return self._commands.get(trigger)

    def triggers(self) -> List[str]:
        return list(self._commands)

    def __contains__(self, trigger: object) -> bool:
        return trigger in self._commands

    def __len__(self) -> int:
        return len(self._commands)

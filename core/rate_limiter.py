"""
RateLimiter - Protection contre les bans Twitch

Limite les réponses envoyées par channel selon les quotas Twitch
(fenêtre glissante de 30 secondes):
- Non-verifie: 18 messages / 30 secondes (défaut, marge de sécurité)
- Moderateur: 100 messages / 30 secondes
"""
import logging
import time
from collections import defaultdict, deque
from typing import Callable, Deque, Dict

LOGGER = logging.getLogger(__name__)

WINDOW_SECONDS = 30.0


class RateLimiter:
    """Rate limiter par channel avec fenetre glissante."""

    def __init__(self, per30: int = 18, clock: Callable[[], float] = time.monotonic):
        if per30 < 1:
            raise ValueError("per30 must be >= 1")
        self.per30 = per30
        self._clock = clock
        self._history: Dict[str, Deque[float]] = defaultdict(deque)

        LOGGER.info(f"RateLimiter init: {per30} messages per {WINDOW_SECONDS:.0f}s")

    def _purge(self, channel: str, now: float) -> Deque[float]:
        hist = self._history[channel]
        while hist and (now - hist[0]) >= WINDOW_SECONDS:
            hist.popleft()
        return hist

    def can_send(self, channel: str) -> bool:
        """Verifie si on peut envoyer un message dans ce channel (et le compte si oui)."""
        now = self._clock()
        hist = self._purge(channel, now)

        if len(hist) >= self.per30:
            LOGGER.warning(f"Rate limit atteint pour #{channel}: {len(hist)}/{self.per30}")
            return False

        hist.append(now)
        return True

    def time_until_available(self, channel: str) -> float:
        """Secondes à attendre avant qu'un slot se libère (0 si disponible)."""
        now = self._clock()
        hist = self._purge(channel, now)
        if len(hist) < self.per30:
            return 0.0
        return max(0.0, WINDOW_SECONDS - (now - hist[0]))

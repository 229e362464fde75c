"""
Core - Dispatch des commandes chat et utilitaires transverses
"""

# Import explicites pour Pylance
from core.command_registry import CommandArgs, CommandRegistry
from core.dispatcher import CommandDispatcher
from core.message_bus import MessageBus
from core.rate_limiter import RateLimiter

__all__ = [
    "CommandArgs",
    "CommandDispatcher",
    "CommandRegistry",
    "MessageBus",
    "RateLimiter",
]

"""
Commands module for Listing Studio.

Provides command handlers, their registry and the message router.
"""

from listing_studio.commands.base import CommandContext, CommandHandler
from listing_studio.commands.registry import CommandRegistry, get_command_registry
from listing_studio.commands.router import CommandRouter

__all__ = [
    "CommandContext",
    "CommandHandler",
    "CommandRegistry",
    "get_command_registry",
    "CommandRouter",
]

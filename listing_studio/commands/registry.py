"""
Command registry for Listing Studio.

Maps inbound message types to their handlers.
"""

from typing import Dict, List, Optional, Type, Any

from listing_studio.commands.base import CommandHandler
from listing_studio.commands.handlers import BUILTIN_COMMANDS


class CommandRegistry:
    """Registry of command handlers keyed by message type."""

    def __init__(self):
        """Initialize empty registry."""
        self._handlers: Dict[str, CommandHandler] = {}

    def register(self, handler_class: Type[CommandHandler]) -> None:
        """
        Register a handler class.

        Args:
            handler_class: CommandHandler subclass (not instance)
        """
        if not handler_class.command_type:
            raise ValueError(f"{handler_class.__name__} does not declare a command_type")
        self._handlers[handler_class.command_type] = handler_class()

    def register_all(self, handler_classes: List[Type[CommandHandler]]) -> None:
        for handler_class in handler_classes:
            self.register(handler_class)

    def get(self, command_type: str) -> Optional[CommandHandler]:
        return self._handlers.get(command_type)

    def command_types(self) -> List[str]:
        return list(self._handlers.keys())

    def get_all_metadata(self) -> Dict[str, Dict[str, Any]]:
        """
        Describe every registered command.

        Returns:
            Dictionary mapping message types to handler metadata
        """
        return {name: handler.get_metadata() for name, handler in self._handlers.items()}


# Singleton registry instance
_global_registry: Optional[CommandRegistry] = None


def get_command_registry() -> CommandRegistry:
    """
    Get the singleton command registry instance.

    Creates it with the built-in commands on first call.

    Returns:
        CommandRegistry instance
    """
    global _global_registry

    if _global_registry is None:
        _global_registry = CommandRegistry()
        _global_registry.register_all(BUILTIN_COMMANDS)

    return _global_registry


def reset_registry() -> CommandRegistry:
    """
    Reset the registry (useful for testing).

    Returns:
        New CommandRegistry instance
    """
    global _global_registry
    _global_registry = None
    return get_command_registry()

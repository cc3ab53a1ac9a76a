"""
Process-wide collaborators shared by every UI connection.
"""

from dataclasses import dataclass, field
from typing import Optional

from listing_studio.config import Settings, settings as default_settings
from listing_studio.generation.state import GenerationState
from listing_studio.host.base import SceneHost
from listing_studio.host.memory import InMemoryScene
from listing_studio.storage import CredentialStore, create_client_storage


@dataclass
class PluginContext:
    host: SceneHost
    credentials: CredentialStore
    generation_state: GenerationState = field(default_factory=GenerationState)
    settings: Settings = field(default_factory=lambda: default_settings)


def build_plugin_context(config: Settings = default_settings) -> PluginContext:
    """
    Build the context described by configuration.

    Args:
        config: Settings to read storage and credential options from

    Returns:
        PluginContext with an in-memory scene host
    """
    storage = create_client_storage(config.STORAGE_BACKEND)
    credentials = CredentialStore(
        storage,
        key=config.CREDENTIAL_STORAGE_KEY,
        min_length=config.CREDENTIAL_MIN_LENGTH,
    )
    return PluginContext(host=InMemoryScene(), credentials=credentials, settings=config)


# Global context instance
_plugin_context: Optional[PluginContext] = None


def get_plugin_context() -> PluginContext:
    """Get or create the global plugin context."""
    global _plugin_context
    if _plugin_context is None:
        _plugin_context = build_plugin_context()
    return _plugin_context


def set_plugin_context(context: PluginContext) -> None:
    global _plugin_context
    _plugin_context = context


def reset_plugin_context():
    """Reset global plugin context (for testing)."""
    global _plugin_context
    _plugin_context = None

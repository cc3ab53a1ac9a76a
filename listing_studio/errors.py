"""
Error taxonomy for Listing Studio.

Every error raised on purpose by the service derives from ListingStudioError.
The command router turns any of them into a user notification plus an
``error`` message; the message text is what the UI shows.
"""

from typing import Optional


class ListingStudioError(Exception):
    """Base class for all service errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SelectionError(ListingStudioError):
    """Zero or more than one node is selected in the host document."""


class MissingCredentialError(ListingStudioError):
    """No remove.bg API key has been saved or configured."""


class ValidationError(ListingStudioError):
    """A credential or an inbound payload failed validation."""


class NotFoundError(ListingStudioError):
    """A referenced frame no longer exists in the document."""


class StateError(ListingStudioError):
    """An operation was requested before the state it needs exists."""


class HostError(ListingStudioError):
    """The host scene capability rejected an operation."""


class BridgeError(ListingStudioError):
    """Base class for failures of a bridge round trip."""


class BridgeTimeoutError(BridgeError, TimeoutError):
    """The UI context did not answer a bridge request in time."""

    def __init__(self, method: str, message: Optional[str] = None):
        super().__init__(message or f"UI request timed out: {method}")
        self.method = method


class RemoteError(BridgeError):
    """The UI context reported a failure (network, remote service, ...)."""


class ProtocolError(BridgeError):
    """A bridge response could not be understood."""


class BridgeClosedError(BridgeError):
    """The channel to the UI context closed with the request outstanding."""

"""
Bridge module for Listing Studio.

Correlates requests to the privileged UI context with their responses.
"""

from listing_studio.bridge.schemas import BridgeRequest, BridgeResponse, UiResult
from listing_studio.bridge.session import BridgeSession, PendingRequest

__all__ = [
    "BridgeRequest",
    "BridgeResponse",
    "UiResult",
    "BridgeSession",
    "PendingRequest",
]

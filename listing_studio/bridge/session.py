import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import ValidationError as PayloadValidationError

from listing_studio.config import settings
from listing_studio.bridge.schemas import BridgeRequest, BridgeResponse
from listing_studio.errors import (
    BridgeClosedError,
    BridgeTimeoutError,
    ProtocolError,
    RemoteError,
)

logger = logging.getLogger("listing.bridge")

UNKNOWN_UI_ERROR = "Unknown UI error"

SendMessage = Callable[[dict], Awaitable[None]]


@dataclass
class PendingRequest:
    """One in-flight bridge call, settled at most once."""

    id: str
    method: str
    future: asyncio.Future
    timer: Optional[asyncio.TimerHandle] = None
    created_at: float = field(default_factory=time.monotonic)

    def succeed(self, data: Any) -> None:
        self._clear()
        if not self.future.done():
            self.future.set_result(data)

    def fail(self, error: Exception) -> None:
        self._clear()
        if not self.future.done():
            self.future.set_exception(error)

    def abandon(self) -> None:
        self._clear()
        self.future.cancel()

    def _clear(self) -> None:
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None


class BridgeSession:
    """
    Request/response correlation over the message channel to the UI context.

    The UI context is the only side allowed to touch the network. Every call
    gets a fresh correlation id, is sent as a ``bridgeRequest`` message and
    is settled by the first ``bridgeResponse`` carrying the same id, by its
    timeout, or by closing the session.
    """

    def __init__(self, send: SendMessage, timeout: float = settings.BRIDGE_TIMEOUT_SECONDS):
        """
        Initialize a session bound to one channel.

        Args:
            send: Coroutine function posting one message to the UI context
            timeout: Seconds to wait for each response
        """
        self._send = send
        self.timeout = timeout
        self._pending: Dict[str, PendingRequest] = {}
        self._next_id = 1
        self._closed = False

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def pending_ids(self) -> List[str]:
        return list(self._pending)

    def _allocate_id(self) -> str:
        request_id = str(self._next_id)
        self._next_id += 1
        return request_id

    async def call(self, method: str, data: Any = None) -> Any:
        """
        Issue a bridge request and wait for its response.

        Args:
            method: Method name understood by the UI context
            data: JSON-serialisable method arguments

        Returns:
            The ``data`` of a successful response

        Raises:
            BridgeTimeoutError: No response within the timeout
            RemoteError: The UI context reported a failure
            ProtocolError: The matching response was malformed
            BridgeClosedError: The session was closed first
        """
        if self._closed:
            raise BridgeClosedError(f"Bridge closed before request: {method}")

        loop = asyncio.get_running_loop()
        request_id = self._allocate_id()
        pending = PendingRequest(id=request_id, method=method, future=loop.create_future())
        pending.timer = loop.call_later(self.timeout, self._expire, request_id)
        self._pending[request_id] = pending

        try:
            logger.debug(f"Bridge request {request_id}: {method}")
            await self._send(BridgeRequest(id=request_id, method=method, data=data).to_message())
            return await pending.future
        finally:
            # Send failure or cancellation of the caller leaves nothing behind
            stale = self._pending.pop(request_id, None)
            if stale is not None:
                stale.abandon()

    def resolve(self, payload: Any) -> bool:
        """
        Settle the pending call a ``bridgeResponse`` payload refers to.

        Args:
            payload: The message payload as received

        Returns:
            True if a pending call was settled, False if the response was ignored
        """
        request_id = payload.get("id") if isinstance(payload, dict) else None
        if request_id is None:
            logger.warning("Ignoring bridge response without id")
            return False

        pending = self._pending.pop(str(request_id), None)
        if pending is None:
            logger.debug(f"Ignoring bridge response for unknown id {request_id}")
            return False

        try:
            response = BridgeResponse.model_validate({**payload, "id": str(request_id)})
        except PayloadValidationError as e:
            logger.error(f"Malformed bridge response for {pending.method}: {e}")
            pending.fail(ProtocolError(f"Malformed response for {pending.method}"))
            return True

        if response.ok:
            pending.succeed(response.data)
        else:
            pending.fail(RemoteError(response.error or UNKNOWN_UI_ERROR))
        return True

    def _expire(self, request_id: str) -> None:
        pending = self._pending.pop(request_id, None)
        if pending is None:
            return
        logger.warning(f"Bridge request {request_id} timed out after {self.timeout}s: {pending.method}")
        pending.timer = None
        pending.fail(BridgeTimeoutError(pending.method))

    def close(self) -> None:
        """Fail every outstanding call; used when the channel goes away."""
        self._closed = True
        pending, self._pending = self._pending, {}
        for request in pending.values():
            request.fail(BridgeClosedError(f"Bridge closed: {request.method}"))
        if pending:
            logger.info(f"Bridge closed with {len(pending)} outstanding request(s)")

"""
Python consumer for the streaming analysis endpoint.

Reads the event stream chunk by chunk, folds each event into a
ClientState with ``reduce`` and reports every intermediate state.
"""
import asyncio
import logging
import uuid
from typing import Callable, Optional
import httpx

from agroenv.client.reducer import ClientState, Notification, fail, reduce, start_search
from agroenv.config import settings
from agroenv.streaming.sse import SSEDecoder, StreamProtocolError

logger = logging.getLogger(__name__)

STREAM_ENDPOINT = "/api/v1/environmental-data"

StateListener = Callable[[ClientState], None]


class EnvironmentalDataClient:
    """
    Client that runs searches against the analysis stream.

    Only the most recent search may publish state: starting a new search
    cancels the one in flight, and updates tagged with an older request id
    are dropped.
    """

    def __init__(
        self,
        base_url: str,
        on_update: Optional[StateListener] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            base_url: Base URL of the analysis API
            on_update: Called with the new state after every merged event
            http_client: Pre-configured client (one is created if omitted)
        """
        self.base_url = base_url
        self.on_update = on_update
        self._owns_client = http_client is None
        self.client = http_client or httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(settings.http_timeout_seconds, read=None),
        )
        self.state: Optional[ClientState] = None
        self._active_request_id: Optional[str] = None
        self._active_task: Optional[asyncio.Task] = None

    async def close(self):
        """Cancel any running search and close the HTTP client."""
        if self._active_task is not None and not self._active_task.done():
            self._active_task.cancel()
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    @property
    def active_request_id(self) -> Optional[str]:
        return self._active_request_id

    async def search(self, location: str) -> ClientState:
        """
        Run a search and return its final state.

        A search superseded by a later call is cancelled; awaiting it then
        raises asyncio.CancelledError.

        Args:
            location: Place name to analyse
        """
        request_id = uuid.uuid4().hex
        previous = self._active_task
        if previous is not None and not previous.done():
            logger.info(f"Cancelling search {self._active_request_id} in favour of {request_id}")
            previous.cancel()

        self._active_request_id = request_id
        task = asyncio.ensure_future(self._run(location, request_id))
        self._active_task = task
        return await task

    def _publish(self, state: ClientState) -> bool:
        """Commit a state if it belongs to the latest search."""
        if state.request_id != self._active_request_id:
            logger.debug(f"Dropping update from superseded search {state.request_id}")
            return False
        self.state = state
        if self.on_update is not None:
            self.on_update(state)
        return True

    async def _run(self, location: str, request_id: str) -> ClientState:
        state = start_search(location, request_id)
        self._publish(state)
        decoder = SSEDecoder()

        try:
            async with self.client.stream(
                "POST", STREAM_ENDPOINT, json={"location": location}
            ) as response:
                if not response.is_success:
                    await response.aread()
                    state = fail(state, f"Failed to fetch data: {response.status_code}")
                    self._publish(state)
                    return state

                async for chunk in response.aiter_text():
                    for event in decoder.feed(chunk):
                        state = reduce(state, event)
                        self._publish(state)

                for event in decoder.flush():
                    state = reduce(state, event)
                    self._publish(state)

        except httpx.HTTPError as e:
            logger.error(f"Stream request for '{location}' failed: {e!r}")
            state = fail(state, str(e) or "Connection to the analysis service failed")
            self._publish(state)
            return state
        except StreamProtocolError as e:
            logger.error(f"Stream for '{location}' was malformed: {e}")
            state = fail(state, str(e), "stream_protocol_error")
            self._publish(state)
            return state

        if state.loading:
            # Stream closed without a terminal complete/error event
            state = state.model_copy(update={
                "loading": False,
                "notifications": [
                    *state.notifications,
                    Notification(
                        title="Incomplete data",
                        description="The analysis stream ended before completion",
                        variant="destructive",
                    ),
                ],
            })
            self._publish(state)
        return state

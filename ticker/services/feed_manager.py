"""
Live Feed Connection Manager.
Owns the single upstream WebSocket connection for one topic: subscribe,
normalize inbound frames into immutable snapshots, and reconnect on a fixed
delay until stopped.
"""

import asyncio
import json
import logging
import time
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

import websockets
from websockets.exceptions import ConnectionClosed

from ticker.config import settings
from ticker.errors import ConfigurationError, FeedTransportError
from ticker.observability.metrics import record_feed_message, record_feed_reconnect, record_feed_status
from ticker.protocols.feed import FeedConnection, Frame
from ticker.schemas.feed import ConnectionState, FeedStatus, SubscribeRequest
from ticker.services.normalizer import normalize_message
from ticker.util.async_tools import AsyncTimeoutError, create_supervised_task, timeout

logger = logging.getLogger("feed_manager")

FEED_ADVISORY_MESSAGE = (
    "WebSocket error (some browsers block ws:// on local files). "
    "Try running via a local server."
)
CLOSE_TIMEOUT_S = 5.0

Connector = Callable[[str], Awaitable[FeedConnection]]
Listener = Callable[[ConnectionState], None]


class ConnectionPhase(str, Enum):
    """Internal lifecycle of the connection state machine."""
    IDLE = "idle"
    CONNECTING = "connecting"
    OPEN = "open"
    RETRYING = "retrying"


async def websocket_connector(url: str) -> FeedConnection:
    """Open a client WebSocket connection."""
    return await websockets.connect(url, close_timeout=10)


class FeedConnectionManager:
    """Best-effort live connection to one upstream topic."""

    def __init__(self,
                 url: Optional[str] = None,
                 topic: Optional[str] = None,
                 retry_delay_ms: Optional[int] = None,
                 connector: Optional[Connector] = None,
                 clock: Optional[Callable[[], float]] = None):
        self.url = url or settings.FEED_WS_URL
        self.topic = topic or settings.FEED_TOPIC
        self.retry_delay_ms = settings.FEED_RETRY_DELAY_MS if retry_delay_ms is None else retry_delay_ms
        if self.retry_delay_ms <= 0:
            raise ConfigurationError(
                "Retry delay must be positive",
                {"retry_delay_ms": self.retry_delay_ms}
            )
        self._connector = connector or websocket_connector
        self._clock = clock or time.time

        self._state = ConnectionState(subscription_topic=self.topic)
        self._listeners: List[Listener] = []

        # Lifecycle
        self._alive = False
        self._phase = ConnectionPhase.IDLE
        self._task: Optional[asyncio.Task] = None
        self._retry_handle: Optional[asyncio.TimerHandle] = None
        self._ws: Optional[FeedConnection] = None
        self._attempt_errored = False

        # Health metrics
        self.reconnect_count = 0
        self.total_messages = 0
        self.ignored_messages = 0
        self.last_message_ts = 0.0

    # -- public surface ---------------------------------------------------

    @property
    def snapshot(self) -> ConnectionState:
        return self._state

    @property
    def phase(self) -> ConnectionPhase:
        return self._phase

    @property
    def running(self) -> bool:
        return self._alive

    @property
    def retry_pending(self) -> bool:
        return self._retry_handle is not None

    async def start(self) -> None:
        """Start the connect cycle. Failures surface through state, not exceptions."""
        if self._alive:
            logger.warning("[feed_manager] Already running")
            return

        # A stop() may still be draining the previous connection task
        previous = self._task
        if previous is not None and not previous.done():
            await asyncio.gather(previous, return_exceptions=True)
            if self._alive:
                return

        self._alive = True
        logger.info(f"[feed_manager] Starting feed for {self.topic} at {self.url}")
        self._connect()

    async def stop(self) -> None:
        """Cancel the retry timer, close the connection and freeze the state."""
        was_alive = self._alive
        # Nothing below may mutate state once this flag is down
        self._alive = False
        if self._retry_handle is not None:
            self._retry_handle.cancel()
            self._retry_handle = None
        self._phase = ConnectionPhase.IDLE
        if was_alive:
            self._publish(self._state.evolve(status=FeedStatus.DISCONNECTED))

        ws, self._ws = self._ws, None
        task = self._task
        if task is not None and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        if self._task is task:
            self._task = None

        if ws is not None:
            await self._close_quietly(ws)

        if was_alive:
            logger.info("[feed_manager] Stopped")

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called with every new snapshot."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def is_connected(self) -> bool:
        return self._state.status == FeedStatus.CONNECTED

    def last_message_s_ago(self) -> float:
        """Get seconds since last inbound frame."""
        if self.last_message_ts == 0:
            return 999.0
        return self._clock() - self.last_message_ts

    def get_health_metrics(self) -> Dict[str, Any]:
        """Get feed health metrics."""
        return {
            "status": self._state.status.value,
            "phase": self._phase.value,
            "running": self._alive,
            "topic": self.topic,
            "url": self.url,
            "reconnects": self.reconnect_count,
            "total_messages": self.total_messages,
            "ignored_messages": self.ignored_messages,
            "last_message_s_ago": round(self.last_message_s_ago(), 1),
            "retry_pending": self.retry_pending,
        }

    # -- connection state machine -----------------------------------------

    def _connect(self) -> None:
        self._retry_handle = None
        if not self._alive:
            return
        if self._task is not None and not self._task.done():
            logger.warning("[feed_manager] Connection attempt already active")
            return

        self._phase = ConnectionPhase.CONNECTING
        self._attempt_errored = False
        self._apply(status=FeedStatus.CONNECTING, last_error=None)
        self._task = create_supervised_task(
            self._run_connection(),
            name=f"feed_connection:{self.topic}:{id(self)}"
        )

    async def _run_connection(self) -> None:
        ws: Optional[FeedConnection] = None
        try:
            try:
                ws = await self._connector(self.url)
            except Exception as e:
                raise FeedTransportError(f"Could not open {self.url}", {"reason": str(e)}) from e

            if not self._alive:
                return
            self._ws = ws
            self._on_open()

            await ws.send(SubscribeRequest(to=self.topic).model_dump_json())
            logger.info(f"[feed_manager] Subscribed to {self.topic}")

            async for raw in ws:
                if not self._alive:
                    break
                self._on_message(raw)

        except ConnectionClosed as e:
            logger.info(f"[feed_manager] Connection closed: {e}")
        except FeedTransportError as e:
            self._on_error(e)
        except Exception as e:
            self._on_error(FeedTransportError("Feed connection failed", {"reason": str(e)}))
        finally:
            if self._ws is ws:
                self._ws = None
            if ws is not None:
                await self._close_quietly(ws)

        self._on_close()

    def _on_open(self) -> None:
        if not self._alive:
            return
        self._phase = ConnectionPhase.OPEN
        logger.info(f"[feed_manager] Connected to {self.url}")
        self._apply(status=FeedStatus.CONNECTED, last_error=None)

    def _on_message(self, raw: Frame) -> None:
        if not self._alive:
            return
        self.total_messages += 1
        self.last_message_ts = self._clock()

        update = normalize_message(raw)
        if update is None:
            self.ignored_messages += 1
            record_feed_message("ignored")
            return

        delta: Dict[str, Any] = {"last_error": None}
        if update.price is not None:
            delta["latest_price"] = update.price
        if update.timestamp is not None:
            delta["latest_timestamp"] = update.timestamp
        record_feed_message("applied")
        self._apply(**delta)

    def _on_error(self, error: FeedTransportError) -> None:
        if not self._alive:
            return
        self._attempt_errored = True
        logger.warning(f"[feed_manager] {error.message}: {error.details.get('reason', '')}")
        self._apply(status=FeedStatus.ERRORING, last_error=FEED_ADVISORY_MESSAGE)

    def _on_close(self) -> None:
        if not self._alive:
            return
        # An errored attempt keeps its advisory visible until the next attempt
        if not self._attempt_errored:
            self._apply(status=FeedStatus.DISCONNECTED)
        self._schedule_retry()

    def _schedule_retry(self) -> None:
        if self._retry_handle is not None:
            return

        self._phase = ConnectionPhase.RETRYING
        self.reconnect_count += 1
        record_feed_reconnect()
        logger.info(json.dumps({
            "evt": "feed_reconnect",
            "delay_ms": self.retry_delay_ms,
            "reconnects": self.reconnect_count,
            "status": self._state.status.value
        }))

        loop = asyncio.get_running_loop()
        self._retry_handle = loop.call_later(self.retry_delay_ms / 1000.0, self._connect)

    # -- state plumbing ---------------------------------------------------

    def _apply(self, **delta: Any) -> None:
        if not self._alive:
            return
        self._publish(self._state.evolve(**delta))

    def _publish(self, new_state: ConnectionState) -> None:
        if new_state == self._state:
            return
        self._state = new_state
        record_feed_status(new_state.status.value)
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception as e:
                logger.error(f"[feed_manager] Snapshot listener failed: {e}")

    async def _close_quietly(self, ws: FeedConnection) -> None:
        try:
            await timeout(ws.close(), CLOSE_TIMEOUT_S)
        except AsyncTimeoutError:
            logger.warning("[feed_manager] Timed out closing connection")
        except Exception as e:
            logger.debug(f"[feed_manager] Error closing connection: {e}")

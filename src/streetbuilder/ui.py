"""
Presentation layer for the mission controller.

The controller forwards every tick and every event to a RunnableUi. The UI
never feeds anything back into decisions. Three implementations:

    NullUi   - ignores everything (default, used by tests and batch runs)
    LogUi    - writes ticks and events to the "streetbuilder.ui" logger
    StreamUi - broadcasts the robot's path to a WebSocket visualization server

StreamUi Threading Model:
    StreamUi (tick thread)            PathSender.run (daemon thread)
    ----------------------            ------------------------------
    sample [row, col, tick]           private asyncio event loop
    every stream_interval ticks:      queue.get(timeout=0.5)
      json batch -> put_nowait  ----> connect on demand, send batch
      (batch dropped if full)         failed batch dropped, backoff
    close() -> put(None)        ----> flush, close connection, exit

    - queue.Queue and threading.Event are the only shared objects
    - samples and counters belong to the tick thread
    - the connection and event loop belong to the sender thread

Protocol:
    {
        "metadata": {"user": "name\\n", "color": "#cc6600",
                     "env_id": "a1b2c3d4:0\\n", "extra": "\\n"},
        "coords": [[row, col, tick], ...]
    }

Dependencies:
    - websockets: For WebSocket communication (imported lazily)
    - json/queue/threading/asyncio: Message passing to the sender thread
"""

from __future__ import annotations

import asyncio
import json
import logging
import queue
import threading
import uuid
from typing import Any

from streetbuilder.world import Event, EventKind, Position, World

logger = logging.getLogger(__name__)

# Stale positions are worthless for a live map. Keep the backlog tiny.
_SEND_QUEUE_MAXSIZE = 2

# Shared by every StreamUi in this process so the server can group them
_RUN_ID = uuid.uuid4().hex[:8]

# Events that change where the robot stands
_POSITION_EVENTS = (EventKind.READY, EventKind.MOVED, EventKind.TELEPORTED)


# =============================================================================
# SIMPLE UIS
# =============================================================================


class NullUi:
    """UI that ignores all notifications."""

    def process_tick(self, world: World) -> None:
        pass

    def handle_event(self, event: Event) -> None:
        pass

    def close(self) -> None:
        pass


class LogUi:
    """
    UI writing to the logging system.

    Ticks are logged at DEBUG every `every` ticks, events at INFO (or DEBUG
    for the chatty energy events).
    """

    def __init__(self, every: int = 100) -> None:
        self.every = every
        self.ticks = 0

    def process_tick(self, world: World) -> None:
        self.ticks += 1
        if self.ticks % self.every == 0:
            logger.debug("Tick %d", self.ticks)

    def handle_event(self, event: Event) -> None:
        if event.kind in (EventKind.ENERGY_CONSUMED, EventKind.ENERGY_RECHARGED):
            logger.debug("%s %s", event.kind.value, event.data)
        else:
            logger.info("%s %s", event.kind.value, event.data)

    def close(self) -> None:
        pass


# =============================================================================
# SENDER
# =============================================================================


class PathSender:
    """
    Delivers queued path batches over one WebSocket connection.

    run() is the target of StreamUi's daemon thread and owns its own asyncio
    event loop. A batch that cannot be delivered is dropped: the connection
    is reopened for the next batch, waiting between failed attempts with a
    delay that doubles from min_backoff up to max_backoff. A None batch or
    the shutdown event ends the loop.

    Attributes:
        address: WebSocket URL of the map server.
        label: Name used in log messages.
        sent: Batches delivered so far.
        dropped: Batches lost to connection or send failures.
    """

    def __init__(
        self,
        address: str,
        send_queue: queue.Queue[str | None],
        shutdown: threading.Event,
        websockets_mod: Any,
        label: str,
        min_backoff: float = 1.0,
        max_backoff: float = 30.0,
    ) -> None:
        self.address = address
        self.label = label
        self.min_backoff = min_backoff
        self.max_backoff = max_backoff
        self.sent = 0
        self.dropped = 0
        self._queue = send_queue
        self._shutdown = shutdown
        self._websockets = websockets_mod
        self._connection: Any | None = None
        self._delay = min_backoff

    def run(self) -> None:
        loop = asyncio.new_event_loop()
        try:
            loop.run_until_complete(self._pump())
        except Exception as e:
            logger.warning("StreamUi [%s]: sender stopped: %s", self.label, e)
        finally:
            loop.close()
        logger.debug("StreamUi [%s]: sent %d batch(es), dropped %d", self.label, self.sent, self.dropped)

    async def _pump(self) -> None:
        try:
            while not self._shutdown.is_set():
                try:
                    batch = self._queue.get(timeout=0.5)
                except queue.Empty:
                    continue
                if batch is None:
                    break
                await self._deliver(batch)
        finally:
            await self._disconnect()

    async def _deliver(self, batch: str) -> None:
        if self._connection is None:
            try:
                self._connection = await self._websockets.connect(self.address)
            except Exception as e:
                self.dropped += 1
                logger.warning(
                    "StreamUi [%s]: cannot reach %s, retrying in %.1fs: %s",
                    self.label,
                    self.address,
                    self._delay,
                    e,
                )
                await asyncio.sleep(self._delay)
                self._delay = min(self._delay * 2, self.max_backoff)
                return
            logger.info("StreamUi [%s]: connected to %s", self.label, self.address)

        try:
            await self._connection.send(batch)
        except Exception as e:
            self.dropped += 1
            logger.warning("StreamUi [%s]: send failed, reconnecting: %s", self.label, e)
            await self._disconnect()
            return
        self.sent += 1
        self._delay = self.min_backoff

    async def _disconnect(self) -> None:
        connection, self._connection = self._connection, None
        if connection is None:
            return
        try:
            await connection.close()
        except Exception as e:
            logger.debug("StreamUi [%s]: close failed: %s", self.label, e)


# =============================================================================
# STREAM UI
# =============================================================================


class StreamUi:
    """
    UI broadcasting the robot's path to a shared map server.

    The position is tracked from READY/MOVED/TELEPORTED events and sampled
    once per tick as [row, col, tick]. Every stream_interval ticks the samples
    are handed to a PathSender on a daemon thread. If websockets is not
    installed, streaming is disabled and the UI behaves like NullUi.

    Attributes:
        enabled: Whether streaming is active.
        stream_metadata: User display information sent with every upload.
        stream_interval: Ticks between uploads.
        tick_counter: Ticks since the last upload.
        coord_list: Buffered [row, col, tick] samples.
        position: Last known robot position.
        sender: The PathSender feeding the server (None when disabled).
    """

    def __init__(
        self,
        username: str = "streetbuilder",
        color: str = "#cc6600",
        stream_interval: int = 50,
        address: str = "ws://localhost:8765/broadcast",
        extra_info: str = "",
        enabled: bool = True,
    ) -> None:
        self.enabled = enabled
        self.stream_interval = stream_interval
        self.tick_counter = 0
        self.total_ticks = 0
        self.coord_list: list[list[int]] = []
        self.position: Position | None = None
        self.stream_metadata: dict[str, Any] = {
            "user": username + "\n",
            "color": color,
            "env_id": f"{_RUN_ID}:0\n",
            "extra": extra_info + "\n",
        }
        self.sender: PathSender | None = None
        self._send_queue: queue.Queue[str | None] = queue.Queue(maxsize=_SEND_QUEUE_MAXSIZE)
        self._shutdown_event = threading.Event()
        self._sender_thread: threading.Thread | None = None

        if not self.enabled:
            return

        try:
            import websockets
        except ImportError:
            logger.warning(
                "websockets not installed, streaming disabled. Install with: pip install websockets"
            )
            self.enabled = False
            return

        self.sender = PathSender(address, self._send_queue, self._shutdown_event, websockets, username)
        self._sender_thread = threading.Thread(
            target=self.sender.run,
            name=f"stream-sender-{username}",
            daemon=True,
        )
        self._sender_thread.start()

    @classmethod
    def from_config(cls, config: Any) -> StreamUi:
        """Build from a BuilderConfig's stream_* settings."""
        return cls(
            username=config.stream_username,
            color=config.stream_color,
            stream_interval=config.stream_interval,
            address=config.stream_address,
            enabled=config.enable_streaming,
        )

    def handle_event(self, event: Event) -> None:
        if event.kind in _POSITION_EVENTS:
            position = event.data.get("target", event.data.get("position"))
            if position is not None:
                self.position = tuple(position)

    def process_tick(self, world: World) -> None:
        self.total_ticks += 1
        if not self.enabled:
            return

        if self.position is not None:
            self.coord_list.append([self.position[0], self.position[1], self.total_ticks])

        self.tick_counter += 1
        if self.tick_counter >= self.stream_interval:
            self._enqueue_coordinates()
            self.tick_counter = 0
            self.coord_list = []

    def _enqueue_coordinates(self) -> None:
        """Serialize the buffer and hand it to the sender, dropping it if the sender is behind."""
        if not self.coord_list:
            return

        message = json.dumps({
            "metadata": self.stream_metadata,
            "coords": self.coord_list,
        })

        try:
            self._send_queue.put_nowait(message)
        except queue.Full:
            logger.debug("StreamUi: sender behind, dropped %d samples", len(self.coord_list))

    def close(self, timeout: float = 5.0) -> None:
        """
        Flush pending uploads and stop the sender thread. Safe to call multiple times.

        Batches queued before close() are still delivered. If the sender is
        too far behind to accept the stop marker, it is told to stop at once.
        """
        if self._sender_thread is None:
            return
        try:
            self._send_queue.put(None, timeout=1.0)
        except queue.Full:
            self._shutdown_event.set()
        self._sender_thread.join(timeout=timeout)
        self._sender_thread = None

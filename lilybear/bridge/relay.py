"""Relay bridge between an external command channel and the whisper bus."""

import asyncio
import concurrent.futures
from collections.abc import Coroutine
from typing import Any

import httpx
from loguru import logger

from lilybear.bridge.parser import parse_external_command
from lilybear.bus.events import BROADCAST, RelayCommand, WhisperMessage
from lilybear.bus.whisper import SubscriptionHandle, WhisperBus
from lilybear.config.schema import RelayConfig
from lilybear.errors import DeliveryFailure, ParseError
from lilybear.utils.helpers import join_url, truncate_string

INGEST_PATH = "/osc"


class RelayBridge:
    """
    Moves whispers across the process boundary.

    Inbound: chat lines (`!lily hello`) are parsed and handed to `ingest`,
    which POSTs them to the process hosting the bus (`relay.target_url`) or,
    when no target is configured, publishes them on the co-located bus.

    Outbound: with `relay.outbound_url` set, every whisper seen on the bus is
    mirrored to that URL.

    Delivery is at-most-once. Calls are bounded by `relay.timeout_seconds`;
    failures are logged and dropped, never retried.
    """

    def __init__(
        self,
        config: RelayConfig,
        bus: WhisperBus | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.bus = bus
        self._transport = transport  # Injected in tests (httpx.MockTransport)
        self._tasks: set[asyncio.Task] = set()
        self._futures: set[concurrent.futures.Future] = set()  # Scheduled from other threads
        self._outbound_handle: SubscriptionHandle | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._warned_open_channel = False

    @property
    def is_remote(self) -> bool:
        return bool(self.config.target_url)

    @property
    def pending(self) -> int:
        return len(self._tasks) + len(self._futures)

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    def is_allowed(self, sender: str) -> bool:
        """Check if an external sender may inject whispers."""
        allow_list = self.config.allow_from
        if not allow_list:
            return True
        return sender in allow_list

    def handle_chat_message(
        self,
        content: str,
        author: str,
        channel_id: str = "",
        author_is_bot: bool = False,
    ) -> asyncio.Task | None:
        """
        Entry point for the chat-side receive loop.

        Returns the background relay task, or None when the message was
        ignored or could not be parsed.
        """
        if author_is_bot:
            return None
        if not self.config.channel_id:
            if not self._warned_open_channel:
                logger.warning("relay.channelId is not set, relaying chat from every channel")
                self._warned_open_channel = True
        elif channel_id != self.config.channel_id:
            return None
        if not content.startswith(self.config.marker):
            return None
        if not self.is_allowed(author):
            logger.warning("Relay denied for sender {}", author)
            return None

        try:
            cmd = parse_external_command(content, sender=author, marker=self.config.marker)
        except ParseError as e:
            logger.warning("Dropping relay command from {}: {}", author, e)
            return None

        return self._spawn(self.ingest(cmd))

    async def ingest(self, cmd: RelayCommand) -> bool:
        """Forward a parsed command to the bus. Returns True when it was delivered."""
        if self.config.target_url:
            return await self._post(self.config.target_url, cmd)
        if self.bus is not None:
            self.bus.publish(cmd.to_whisper())
            return True
        logger.debug("Relay target not configured, dropping whisper to {}", cmd.to)
        return False

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    def attach_outbound(self) -> bool:
        """Mirror bus traffic to `relay.outbound_url`. No-op when unset or no bus."""
        if self._outbound_handle is not None:
            return True
        if not self.config.outbound_url or self.bus is None:
            return False
        try:
            self._loop = asyncio.get_running_loop()
        except RuntimeError:
            self._loop = None
        self._outbound_handle = self.bus.subscribe(BROADCAST, self._on_bus_whisper)
        logger.info("Outbound relay enabled → {}", self.config.outbound_url)
        return True

    def detach_outbound(self) -> None:
        if self._outbound_handle is not None and self.bus is not None:
            self.bus.unsubscribe(self._outbound_handle)
        self._outbound_handle = None

    def _on_bus_whisper(self, msg: WhisperMessage) -> None:
        self._spawn(self._post(self.config.outbound_url, RelayCommand.from_whisper(msg)))

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    async def _post(self, base_url: str, cmd: RelayCommand) -> bool:
        url = join_url(base_url, INGEST_PATH)
        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout_seconds, transport=self._transport
            ) as client:
                response = await client.post(url, json=cmd.to_payload())
                if response.status_code >= 400:
                    raise DeliveryFailure(url, f"HTTP {response.status_code}")
        except (httpx.HTTPError, httpx.InvalidURL, DeliveryFailure) as e:
            detail = e.detail if isinstance(e, DeliveryFailure) else (str(e) or type(e).__name__)
            logger.error(
                "Failed to relay whisper {} → {} ({}): {}",
                cmd.sender,
                cmd.to,
                truncate_string(cmd.body, 200),
                detail,
            )
            return False
        return True

    def _spawn(self, coro: Coroutine[Any, Any, bool]) -> asyncio.Task | None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is None:
            if self._loop is not None and self._loop.is_running():
                future = asyncio.run_coroutine_threadsafe(coro, self._loop)
                self._futures.add(future)
                future.add_done_callback(self._on_future_done)
                return None
            coro.close()
            logger.warning("No event loop running, relay call dropped")
            return None

        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _on_future_done(self, future: concurrent.futures.Future) -> None:
        self._futures.discard(future)
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error("Relay call scheduled from another thread failed: {}", error)

    async def aclose(self) -> None:
        """Detach from the bus and wait for in-flight relay calls."""
        self.detach_outbound()
        pending = [*self._tasks, *(asyncio.wrap_future(f) for f in list(self._futures))]
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

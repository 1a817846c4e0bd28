"""Agent: a named subscriber on the whisper bus."""

from collections.abc import Callable
from typing import TYPE_CHECKING

from loguru import logger

from lilybear.bus.events import BROADCAST, WhisperMessage

if TYPE_CHECKING:
    from lilybear.bus.whisper import SubscriptionHandle, WhisperBus

Reaction = Callable[["Agent", str, str], None]
DisplaySink = Callable[[str], None]


class Agent:
    """
    A council member listening on the bus under its own name.

    Behaviour is supplied as a reaction callable `(agent, sender, body)`
    rather than by subclassing, so every agent shares the same subscribe,
    filter and whisper plumbing.
    """

    def __init__(
        self,
        name: str,
        bus: "WhisperBus",
        reaction: Reaction | None = None,
        role: str = "",
        display: DisplaySink | None = None,
    ):
        if not name or name == BROADCAST:
            raise ValueError(f"invalid agent name {name!r}")
        self.name = name
        self.role = role
        self.bus = bus
        self.reaction = reaction
        self.last_message: str = ""
        self.display_text: str = ""
        self._display = display
        self._handle: "SubscriptionHandle | None" = None

    @property
    def is_active(self) -> bool:
        return self._handle is not None

    def activate(self) -> None:
        """Start listening on the bus. Calling twice keeps one subscription."""
        if self._handle is None:
            self._handle = self.bus.subscribe(self.name, self.handle_whisper)
            logger.info("Agent {} ({}) joined the bus", self.name, self.role or "no role")

    def deactivate(self) -> None:
        if self._handle is not None:
            self.bus.unsubscribe(self._handle)
            self._handle = None
            logger.info("Agent {} left the bus", self.name)

    def handle_whisper(self, msg: WhisperMessage) -> None:
        """Bus callback: react only to whispers for this agent or for everyone."""
        if msg.to != self.name and msg.to != BROADCAST:
            return
        logger.debug("[{}] received from {}: {}", self.name, msg.sender, msg.body)
        self.last_message = f"{msg.sender}: {msg.body}"
        self.on_message(msg.sender, msg.body)

    def on_message(self, sender: str, body: str) -> None:
        if self.reaction is not None:
            self.reaction(self, sender, body)

    def whisper(self, to: str, body: str) -> int:
        """Publish a whisper from this agent. Returns the number of handlers reached."""
        return self.bus.publish(WhisperMessage(sender=self.name, to=to, body=body))

    def show(self, text: str) -> None:
        """Push text to the agent's display, if it has one."""
        self.display_text = text
        if self._display is not None:
            self._display(text)

    def __repr__(self) -> str:
        state = "active" if self.is_active else "inactive"
        return f"Agent({self.name!r}, {state})"

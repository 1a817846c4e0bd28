"""Event types for the whisper bus."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

BROADCAST = "*"  # Reserved addressee: deliver to every subscriber


@dataclass(frozen=True)
class WhisperMessage:
    """An addressed message travelling through the bus."""

    sender: str  # Origin name; not verified against the registry
    to: str  # Agent name or BROADCAST
    body: str
    timestamp: datetime = field(default_factory=datetime.now, compare=False)

    @property
    def is_broadcast(self) -> bool:
        return self.to == BROADCAST


@dataclass(frozen=True)
class RelayCommand:
    """A whisper request coming from outside the process."""

    sender: str  # External sender identity (chat username, service name)
    to: str
    body: str

    def to_whisper(self) -> WhisperMessage:
        return WhisperMessage(sender=self.sender, to=self.to, body=self.body)

    def to_payload(self) -> dict[str, Any]:
        """Wire format accepted by the ingestion endpoint."""
        return {"from": self.sender, "to": self.to, "message": self.body}

    @classmethod
    def from_whisper(cls, msg: WhisperMessage) -> "RelayCommand":
        return cls(sender=msg.sender, to=msg.to, body=msg.body)


@dataclass(frozen=True)
class HandlerFault:
    """A subscriber raised while a whisper was being dispatched."""

    subscriber: str
    message: WhisperMessage
    error: BaseException

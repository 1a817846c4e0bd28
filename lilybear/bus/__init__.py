"""Whisper bus module for addressed agent-to-agent messaging."""

from lilybear.bus.events import BROADCAST, HandlerFault, RelayCommand, WhisperMessage
from lilybear.bus.registry import AddressRegistry
from lilybear.bus.whisper import SubscriptionHandle, WhisperBus

__all__ = [
    "BROADCAST",
    "AddressRegistry",
    "HandlerFault",
    "RelayCommand",
    "SubscriptionHandle",
    "WhisperBus",
    "WhisperMessage",
]

"""Relay bridge: external chat commands in, bus traffic out."""

from lilybear.bridge.parser import parse_external_command
from lilybear.bridge.relay import RelayBridge

__all__ = ["RelayBridge", "parse_external_command"]

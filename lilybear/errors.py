"""Exception hierarchy shared by the bus, the relay bridge and the dispatcher."""

from enum import Enum


class LilybearError(Exception):
    """Base class for all lilybear errors."""


class ParseFailure(str, Enum):
    """Why an external relay command could not be parsed."""

    NOT_A_COMMAND = "not_a_command"
    EMPTY_BODY = "empty_body"


class ParseError(LilybearError):
    """Malformed external command (e.g. `!hello` with nothing to whisper)."""

    def __init__(self, reason: ParseFailure, raw: str = ""):
        self.reason = reason
        self.raw = raw
        super().__init__(f"{reason.value}: {raw!r}")


class DeliveryFailure(LilybearError):
    """Outbound relay call failed or timed out."""

    def __init__(self, url: str, detail: str):
        self.url = url
        self.detail = detail
        super().__init__(f"delivery to {url} failed: {detail}")


class CommandNotFound(LilybearError):
    """No route registered for the requested command path."""

    def __init__(self, path: tuple[str, ...]):
        self.path = path
        super().__init__(f"unknown command: {' '.join(path) or '<empty>'}")

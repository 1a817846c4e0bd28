"""Parsing of `!<addressee> <body>` chat commands."""

import re

from lilybear.bus.events import BROADCAST, RelayCommand
from lilybear.errors import ParseError, ParseFailure

_FIRST_WHITESPACE = re.compile(r"\s")


def parse_external_command(
    raw: str, sender: str = "external", marker: str = "!"
) -> RelayCommand:
    """
    Turn a chat line such as `!athena status` into a relay command.

    The marker is stripped, the text is split on its first whitespace
    character, the leading token becomes the addressee (broadcast when empty)
    and the stripped remainder becomes the body.

    Raises:
        ParseError: NOT_A_COMMAND if `raw` does not start with `marker`,
            EMPTY_BODY if nothing follows the addressee.
    """
    if not raw.startswith(marker):
        raise ParseError(ParseFailure.NOT_A_COMMAND, raw)

    parts = _FIRST_WHITESPACE.split(raw[len(marker):], maxsplit=1)
    to = parts[0] or BROADCAST
    body = parts[1].strip() if len(parts) > 1 else ""
    if not body:
        raise ParseError(ParseFailure.EMPTY_BODY, raw)
    return RelayCommand(sender=sender, to=to, body=body)

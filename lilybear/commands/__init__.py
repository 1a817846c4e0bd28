"""External command surface: routing table and the jobs it triggers."""

from lilybear.commands.dispatcher import (
    COMMAND_ROUTES,
    CommandDispatcher,
    CommandRoute,
    parse_command_path,
)
from lilybear.commands.report import CouncilReport

__all__ = [
    "COMMAND_ROUTES",
    "CommandDispatcher",
    "CommandRoute",
    "CouncilReport",
    "parse_command_path",
]

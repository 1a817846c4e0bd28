"""Routing table for the external slash-command surface."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Literal

from loguru import logger

from lilybear.bridge.parser import parse_external_command
from lilybear.bridge.relay import RelayBridge
from lilybear.errors import CommandNotFound

JobRunner = Callable[[], Awaitable[Any]]

RouteKind = Literal["job", "whisper"]


@dataclass(frozen=True)
class CommandRoute:
    """One entry of the command table."""

    path: tuple[str, ...]
    kind: RouteKind
    description: str
    ack: str


COMMAND_ROUTES: tuple[CommandRoute, ...] = (
    CommandRoute(
        path=("council", "report", "now"),
        kind="job",
        description="Post the nightly council report immediately",
        ack="Summoning council report…",
    ),
    CommandRoute(
        path=("council", "whisper"),
        kind="whisper",
        description="Whisper to a council member: <addressee> <message>",
        ack="Whisper sent.",
    ),
)


def parse_command_path(command: str) -> tuple[str, ...]:
    """Split `/council report now` into ("council", "report", "now")."""
    return tuple(command.strip().lstrip("/").split())


class CommandDispatcher:
    """
    Maps an external command path to an action.

    Job routes are acknowledged straight away and the job runs in the
    background; its result is logged, never returned to the caller.
    Whisper routes hand their text argument to the relay bridge.
    """

    def __init__(
        self,
        bridge: RelayBridge,
        job_runner: JobRunner | None = None,
        routes: tuple[CommandRoute, ...] = COMMAND_ROUTES,
    ):
        self.bridge = bridge
        self.job_runner = job_runner
        self._routes = {r.path: r for r in routes}
        self._jobs: set[asyncio.Task] = set()

    def routes(self) -> list[CommandRoute]:
        return list(self._routes.values())

    def resolve(self, path: tuple[str, ...]) -> CommandRoute:
        route = self._routes.get(path)
        if route is None:
            raise CommandNotFound(path)
        return route

    async def dispatch(
        self, path: tuple[str, ...], text: str = "", sender: str = "external"
    ) -> str:
        """
        Run the action registered for `path` and return its acknowledgement.

        Raises:
            CommandNotFound: No route for `path`.
            ParseError: Whisper text is not `<addressee> <message>`.
        """
        route = self.resolve(path)
        logger.info("Command {} from {}", " ".join(path), sender)

        if route.kind == "job":
            self._start_job(" ".join(path))
        else:
            marker = self.bridge.config.marker
            cmd = parse_external_command(f"{marker}{text.strip()}", sender=sender, marker=marker)
            task = asyncio.create_task(self.bridge.ingest(cmd))
            self._track(task)
        return route.ack

    def _start_job(self, name: str) -> None:
        if self.job_runner is None:
            logger.warning("No job runner configured for {}", name)
            return
        self._track(asyncio.create_task(self._run_job(name)))

    async def _run_job(self, name: str) -> None:
        try:
            result = await self.job_runner()
            logger.info("Job {} finished: {}", name, result)
        except Exception as e:
            logger.error("Job {} failed: {}", name, e)

    def _track(self, task: asyncio.Task) -> None:
        self._jobs.add(task)
        task.add_done_callback(self._jobs.discard)

    async def drain(self) -> None:
        """Wait for background jobs and whispers started by `dispatch`."""
        if self._jobs:
            await asyncio.gather(*list(self._jobs), return_exceptions=True)

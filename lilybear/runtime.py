"""Wiring of bus, council, bridge and HTTP app for one process."""

from dataclasses import dataclass, field

from fastapi import FastAPI

from lilybear.agent.base import Agent
from lilybear.agent.council import build_council
from lilybear.bridge.relay import RelayBridge
from lilybear.bridge.server import create_app
from lilybear.bus.whisper import WhisperBus
from lilybear.commands.dispatcher import CommandDispatcher
from lilybear.commands.report import CouncilReport
from lilybear.config.schema import Config


@dataclass
class Runtime:
    """Everything `lilybear serve` runs, built from one Config."""

    config: Config
    bus: WhisperBus
    agents: list[Agent]
    bridge: RelayBridge
    dispatcher: CommandDispatcher
    app: FastAPI = field(repr=False)

    @classmethod
    def build(cls, config: Config) -> "Runtime":
        bus = WhisperBus()
        agents = build_council(bus, config.enabled_agents)
        # Co-located: the server's own bridge publishes locally
        bridge = RelayBridge(config.relay.model_copy(update={"target_url": ""}), bus=bus)
        report = CouncilReport(agents)
        dispatcher = CommandDispatcher(bridge, job_runner=report.run)
        app = create_app(bus, dispatcher=dispatcher)
        return cls(config, bus, agents, bridge, dispatcher, app)

    async def start(self) -> None:
        self.bridge.attach_outbound()

    async def stop(self) -> None:
        await self.dispatcher.drain()
        await self.bridge.aclose()
        for agent in self.agents:
            agent.deactivate()

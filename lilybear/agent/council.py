"""Build the council of agents from configuration."""

from collections.abc import Callable

from loguru import logger

from lilybear.agent.base import Agent, DisplaySink
from lilybear.agent.reactions import ReactionTable
from lilybear.bus.whisper import WhisperBus
from lilybear.config.schema import AgentConfig


def build_agent(
    cfg: AgentConfig, bus: WhisperBus, display: DisplaySink | None = None
) -> Agent:
    """Create one agent whose reaction is its configured rule table (not yet active)."""
    reaction = ReactionTable.from_config(cfg.rules) if cfg.rules else None
    return Agent(cfg.name, bus, reaction=reaction, role=cfg.role, display=display)


def build_council(
    bus: WhisperBus,
    agent_configs: list[AgentConfig],
    display_factory: Callable[[str], DisplaySink | None] | None = None,
    activate: bool = True,
) -> list[Agent]:
    """
    Instantiate every enabled agent and, by default, subscribe them all.

    `display_factory` maps an agent name to the display sink it should write
    to; agents without one keep their display text for inspection only.
    """
    agents: list[Agent] = []
    for cfg in agent_configs:
        if not cfg.enabled:
            logger.debug("Skipping disabled agent {}", cfg.name)
            continue
        display = display_factory(cfg.name) if display_factory else None
        agent = build_agent(cfg, bus, display=display)
        if activate:
            agent.activate()
        agents.append(agent)
    logger.info("Council assembled: {}", ", ".join(a.name for a in agents) or "(empty)")
    return agents

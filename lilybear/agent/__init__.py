"""Agent module: named bus subscribers and their reaction tables."""

from lilybear.agent.base import Agent
from lilybear.agent.council import build_agent, build_council
from lilybear.agent.reactions import ReactionRule, ReactionTable

__all__ = ["Agent", "ReactionRule", "ReactionTable", "build_agent", "build_council"]

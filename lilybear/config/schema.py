"""Configuration schema using Pydantic."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings

from lilybear.bus.events import BROADCAST


class Base(BaseModel):
    """Base model that accepts both camelCase and snake_case config keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReactionRuleConfig(Base):
    """One row of an agent's reaction table."""

    match: Literal["prefix", "contains"] = "prefix"
    pattern: str
    to: str = BROADCAST  # "{from}" whispers back to the sender
    reply: str | None = None  # None on a prefix rule forwards the stripped body
    display: str | None = None  # Text pushed to the agent's display sink


class AgentConfig(Base):
    """A council member."""

    name: str
    role: str = ""
    enabled: bool = True
    rules: list[ReactionRuleConfig] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str) -> str:
        if not v or v == BROADCAST:
            raise ValueError(f"invalid agent name {v!r}")
        return v


def _default_council() -> list[AgentConfig]:
    return [
        AgentConfig(
            name="Lilybear",
            role="Voice & Operations",
            rules=[ReactionRuleConfig(match="prefix", pattern="/route ", to=BROADCAST)],
        ),
        AgentConfig(
            name="Serafina",
            role="Comms & Routing",
            rules=[
                ReactionRuleConfig(
                    match="prefix",
                    pattern="bless",
                    to="ShadowFlowers",
                    reply="Please deliver a blessing to the hall.",
                )
            ],
        ),
        AgentConfig(
            name="ShadowFlowers",
            role="Sentiment & Rituals",
            rules=[
                ReactionRuleConfig(
                    match="contains",
                    pattern="blessing",
                    to="Lilybear",
                    reply="Blessing delivered.",
                    display="🌸 May your path be protected and your heart be held.",
                )
            ],
        ),
    ]


class RelayConfig(Base):
    """External relay bridge configuration."""

    target_url: str = ""  # Process hosting the bus; empty = publish locally / no-op
    outbound_url: str = ""  # Where bus traffic is mirrored; empty = disabled
    channel_id: str = ""  # Only chat from this channel is relayed; empty accepts any channel (warned once)
    marker: str = "!"
    timeout_seconds: float = 5.0
    allow_from: list[str] = Field(default_factory=list)  # Allowed external senders

    @field_validator("marker")
    @classmethod
    def _check_marker(cls, v: str) -> str:
        if len(v) != 1:
            raise ValueError("marker must be exactly one character")
        return v


class ServerConfig(Base):
    """Ingestion HTTP server configuration."""

    host: str = "127.0.0.1"
    port: int = 18795


class Config(BaseSettings):
    """Root configuration for lilybear."""

    agents: list[AgentConfig] = Field(default_factory=_default_council)
    relay: RelayConfig = Field(default_factory=RelayConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @property
    def enabled_agents(self) -> list[AgentConfig]:
        return [a for a in self.agents if a.enabled]

    model_config = ConfigDict(env_prefix="LILYBEAR_", env_nested_delimiter="__")

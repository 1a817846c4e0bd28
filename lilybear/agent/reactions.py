"""Reaction tables: simple body-matching rules that make an agent whisper."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from lilybear.config.schema import ReactionRuleConfig

if TYPE_CHECKING:
    from lilybear.agent.base import Agent


@dataclass(frozen=True)
class ReactionRule:
    """
    If the body matches `pattern`, whisper `reply` to `to`.

    A prefix rule without a reply forwards the body with the prefix removed.
    `{from}` in `to` is replaced by the sender's name.
    """

    pattern: str
    to: str
    match: Literal["prefix", "contains"] = "prefix"
    reply: str | None = None
    display: str | None = None

    def matches(self, body: str) -> bool:
        if self.match == "prefix":
            return body.startswith(self.pattern)
        return self.pattern in body

    def render(self, sender: str, body: str) -> tuple[str, str]:
        """Return the (addressee, body) of the whisper this rule sends."""
        to = self.to.replace("{from}", sender)
        if self.reply is not None:
            return to, self.reply
        if self.match == "prefix":
            return to, body[len(self.pattern):]
        return to, body

    @classmethod
    def from_config(cls, cfg: ReactionRuleConfig) -> "ReactionRule":
        return cls(
            pattern=cfg.pattern,
            to=cfg.to,
            match=cfg.match,
            reply=cfg.reply,
            display=cfg.display,
        )


class ReactionTable:
    """Ordered rules, all of which fire when they match. Usable as an agent reaction."""

    def __init__(self, rules: list[ReactionRule] | None = None):
        self.rules: list[ReactionRule] = list(rules or [])

    def add(self, rule: ReactionRule) -> "ReactionTable":
        self.rules.append(rule)
        return self

    def __call__(self, agent: "Agent", sender: str, body: str) -> None:
        for rule in self.rules:
            if not rule.matches(body):
                continue
            if rule.display is not None:
                agent.show(rule.display)
            to, text = rule.render(sender, body)
            if text:
                agent.whisper(to, text)

    def __len__(self) -> int:
        return len(self.rules)

    @classmethod
    def from_config(cls, rules: list[ReactionRuleConfig]) -> "ReactionTable":
        return cls([ReactionRule.from_config(r) for r in rules])

"""Council report job: a status summary of every agent on the bus."""

from datetime import datetime

from loguru import logger

from lilybear.agent.base import Agent
from lilybear.utils.helpers import truncate_string

HEARD_MAX_LEN = 80


class CouncilReport:
    """
    Renders who is on the council and what each member last heard.

    The report is only logged. It is never published on the bus, so it
    cannot trigger reaction rules or end up in an agent's `last_message`.
    """

    def __init__(self, agents: list[Agent]):
        self.agents = agents

    def render(self, now: datetime | None = None) -> str:
        now = now or datetime.now()
        lines = [f"Council report: {now.strftime('%Y-%m-%d %H:%M')}"]
        if not self.agents:
            lines.append("(no council members)")
        for agent in self.agents:
            state = "present" if agent.is_active else "absent"
            role = f" ({agent.role})" if agent.role else ""
            lines.append(f"- {agent.name}{role}: {state}, last heard: {_heard(agent)}")
        return "\n".join(lines)

    async def run(self) -> str:
        report = self.render()
        logger.info("{}", report)
        return report


def _heard(agent: Agent) -> str:
    if not agent.last_message:
        return "nothing yet"
    first_line = agent.last_message.splitlines()[0]
    return truncate_string(first_line, HEARD_MAX_LEN)

"""
Role Agent Registry

Maps each stakeholder role to its agent factory, task factory and the
static insights used when that role's evaluation fails.
"""

from typing import Callable, NamedTuple

from crewai import Agent, Task

from schemas.evaluation import AgentRole
from agents.delivery_agent import (
    create_delivery_agent, create_delivery_task, DELIVERY_FALLBACK_INSIGHTS
)
from agents.product_agent import (
    create_product_agent, create_product_task, PRODUCT_FALLBACK_INSIGHTS
)
from agents.architecture_agent import (
    create_architecture_agent, create_architecture_task, ARCHITECTURE_FALLBACK_INSIGHTS
)
from agents.engineering_agent import (
    create_engineering_agent, create_engineering_task, ENGINEERING_FALLBACK_INSIGHTS
)
from agents.procurement_agent import (
    create_procurement_agent, create_procurement_task, PROCUREMENT_FALLBACK_INSIGHTS
)
from agents.security_agent import (
    create_security_agent, create_security_task, SECURITY_FALLBACK_INSIGHTS
)


class RoleAgentSpec(NamedTuple):
    create_agent: Callable[[], Agent]
    create_task: Callable[..., Task]
    fallback_insights: list[str]


ROLE_AGENTS: dict[AgentRole, RoleAgentSpec] = {
    AgentRole.DELIVERY: RoleAgentSpec(
        create_delivery_agent, create_delivery_task, DELIVERY_FALLBACK_INSIGHTS
    ),
    AgentRole.PRODUCT: RoleAgentSpec(
        create_product_agent, create_product_task, PRODUCT_FALLBACK_INSIGHTS
    ),
    AgentRole.ARCHITECTURE: RoleAgentSpec(
        create_architecture_agent, create_architecture_task, ARCHITECTURE_FALLBACK_INSIGHTS
    ),
    AgentRole.ENGINEERING: RoleAgentSpec(
        create_engineering_agent, create_engineering_task, ENGINEERING_FALLBACK_INSIGHTS
    ),
    AgentRole.PROCUREMENT: RoleAgentSpec(
        create_procurement_agent, create_procurement_task, PROCUREMENT_FALLBACK_INSIGHTS
    ),
    AgentRole.SECURITY: RoleAgentSpec(
        create_security_agent, create_security_task, SECURITY_FALLBACK_INSIGHTS
    ),
}


def get_fallback_insights(role: AgentRole) -> list[str]:
    """Static insights substituted when a role agent fails."""
    return list(ROLE_AGENTS[role].fallback_insights)

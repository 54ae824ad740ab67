"""Damaged item and warranty specialist."""

from typing import Sequence

from pydantic import BaseModel, Field

from src.agents.specialist import BaseSpecialist
from src.agents.tool import Tool
from src.tools.cost_database import CostDatabaseTool


class DamageReportArgs(BaseModel):
    """Arguments the orchestrator extracts for a damage report."""

    item_name: str = Field(description="Name or identifier of the damaged item")
    description_of_damage: str = Field(
        description="Detailed description of the damage observed by the user"
    )


class DamageSpecialist(BaseSpecialist):
    """Analyzes damage reports and decides between return, repair or replacement.

    Uses the cost database to estimate repair and replacement costs.
    """

    name = "damage_specialist"
    description = (
        "Use this agent when the user reports a damaged, broken or defective item."
    )
    args_model = DamageReportArgs

    def _build_tools(self) -> Sequence[Tool]:
        return [CostDatabaseTool()]

    def _build_system_prompt(self) -> str:
        return """You are the damage and warranty specialist of a delivery company's customer service.

RULES:
1. Look up the item with the lookup_cost tool to estimate repair and replacement costs.
2. Recommend repair when a repair cost exists and is below half the replacement cost, otherwise replacement.
3. If the item is not in the catalogue, recommend a manual review by the claims team.
4. Answer with: item, assessment of the damage, recommendation, estimated cost and next steps.
5. Do not approve refunds yourself; recommend only."""

    def build_prompt(self, args: DamageReportArgs) -> str:
        return (
            f"Damage report for item '{args.item_name}'. "
            f"Damage description: {args.description_of_damage}"
        )

"""Delivery address change specialist."""

from typing import Sequence

from pydantic import BaseModel, Field

from src.agents.specialist import BaseSpecialist
from src.agents.tool import Tool
from src.tools.geocoding import GeocodingTool


class AddressChangeArgs(BaseModel):
    """Arguments the orchestrator extracts for an address change."""

    customer_id: str = Field(
        description="Customer identifier or account number; use 'unknown' if the user did not give one"
    )
    new_address: str = Field(
        description="The complete new delivery address requested by the user"
    )
    reason: str = Field(
        description="Why the customer wants the change; use 'not specified' if not stated"
    )


class AddressSpecialist(BaseSpecialist):
    """Handles delivery address and shipping detail changes."""

    name = "address_specialist"
    description = (
        "Use this agent when the user wants to change their delivery address "
        "or modify shipping details."
    )
    args_model = AddressChangeArgs

    def _build_tools(self) -> Sequence[Tool]:
        return [GeocodingTool()]

    def _build_system_prompt(self) -> str:
        return """You are the address change specialist of a delivery company's customer service.

RULES:
1. Always verify the new address with the geocode_address tool before confirming anything.
2. If the address cannot be found, say so and ask for a corrected address. Never invent one.
3. If the customer identifier is 'unknown', state that it is needed before the change can be applied.
4. Answer with a short summary: customer, verified address (or the problem), reason, next steps.
5. Do not promise delivery dates."""

    def build_prompt(self, args: AddressChangeArgs) -> str:
        return (
            f"Process an address change for customer {args.customer_id}. "
            f"New address: {args.new_address}. Reason: {args.reason}"
        )

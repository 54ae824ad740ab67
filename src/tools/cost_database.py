"""Replacement and repair cost lookup."""

import re
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, Field

from src.agents.tool import Tool
from src.utils.logger import get_logger

logger = get_logger()

CURRENCY = "EUR"

# Shorter queries only match catalogue names as whole words
MIN_FRAGMENT_LENGTH = 4

# item -> (replacement cost, typical repair cost)
DEFAULT_COSTS: Dict[str, Tuple[float, float]] = {
    "laptop": (1200.0, 250.0),
    "smartphone": (800.0, 180.0),
    "tablet": (500.0, 140.0),
    "monitor": (300.0, 90.0),
    "television": (900.0, 220.0),
    "headphones": (150.0, 45.0),
    "keyboard": (80.0, 25.0),
    "microwave": (200.0, 70.0),
    "coffee machine": (350.0, 95.0),
    "chair": (180.0, 50.0),
    "table": (400.0, 110.0),
    "lamp": (60.0, 20.0),
    "vase": (45.0, 0.0),
    "mirror": (120.0, 0.0),
}


class CostLookupArgs(BaseModel):
    item_name: str = Field(description="Name of the item to price, e.g. 'laptop' or 'coffee machine'")


class CostDatabaseTool(Tool):
    """Looks up replacement and repair costs for catalogue items."""

    name = "lookup_cost"
    description = (
        "Look up the replacement cost and typical repair cost of an item. "
        "Use it to estimate whether a damaged item should be repaired or replaced."
    )
    args_model = CostLookupArgs

    def __init__(self, costs: Optional[Mapping[str, Tuple[float, float]]] = None):
        self.costs = {key.lower(): value for key, value in (costs or DEFAULT_COSTS).items()}

    def find(self, item_name: str) -> Optional[str]:
        """Find the catalogue key for an item name.

        Tries an exact match, then a catalogue name appearing as whole
        words in the query (plurals allowed), then a query long enough to
        be a fragment of a catalogue name.
        """
        key = " ".join(item_name.lower().split())
        if not key:
            return None
        if key in self.costs:
            return key

        # Prefer the longest catalogue name
        candidates = sorted(self.costs, key=len, reverse=True)
        for candidate in candidates:
            if re.search(rf"\b{re.escape(candidate)}(?:e?s)?\b", key):
                return candidate

        if len(key) >= MIN_FRAGMENT_LENGTH:
            for candidate in candidates:
                if key in candidate:
                    return candidate
        return None

    async def run(self, args: CostLookupArgs) -> Dict[str, Any]:
        key = self.find(args.item_name)

        if key is None:
            logger.info(f"No cost entry for '{args.item_name}'")
            return {"item": args.item_name, "found": False}

        replacement, repair = self.costs[key]
        return {
            "item": key,
            "found": True,
            "replacement_cost": replacement,
            "repair_cost": repair if repair > 0 else None,
            "currency": CURRENCY,
        }

"""Stock adjustment owed to the inventory collaborator after a transition.

The Order never touches inventory. Transitions that consume or release stock
return a ``StockAdjustment`` describing what the caller must now apply.
"""

from dataclasses import dataclass, field
from enum import Enum


class StockAction(Enum):
    DECREMENT = "Decrement"
    RESTORE = "Restore"
    NONE = "None"


@dataclass(frozen=True)
class StockAdjustment:
    """Units per product id to decrement or restore."""

    action: StockAction
    quantities: dict[str, int] = field(default_factory=dict)

    @property
    def required(self) -> bool:
        return self.action != StockAction.NONE

    @classmethod
    def decrement(cls, quantities) -> "StockAdjustment":
        return cls(StockAction.DECREMENT, dict(quantities))

    @classmethod
    def restore(cls, quantities) -> "StockAdjustment":
        return cls(StockAction.RESTORE, dict(quantities))

    @classmethod
    def none(cls) -> "StockAdjustment":
        return cls(StockAction.NONE)

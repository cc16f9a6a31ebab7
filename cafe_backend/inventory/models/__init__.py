from .raw_item import RawItem
from .branch_stock import BranchStock
from .stock_movement import StockMovement
from .stock_alert import StockAlert

__all__ = [
    "RawItem",
    "BranchStock",
    "StockMovement",
    "StockAlert",
]

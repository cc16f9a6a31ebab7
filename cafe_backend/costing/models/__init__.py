from .order_costing import OrderCosting

__all__ = ["OrderCosting"]

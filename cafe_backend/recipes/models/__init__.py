from .menu_product import MenuProduct
from .recipe_line import RecipeLine
from .product_addon import ProductAddon

__all__ = [
    "MenuProduct",
    "RecipeLine",
    "ProductAddon",
]

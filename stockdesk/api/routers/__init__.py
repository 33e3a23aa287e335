from . import categories
from . import products
from . import stock_movements

__all__ = [
    "categories",
    "products",
    "stock_movements",
]

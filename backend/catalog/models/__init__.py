from catalog.models.category import Category
from catalog.models.product import Product
from catalog.models.refresh_token import RefreshToken
from catalog.models.user import User

__all__ = [
    "Category",
    "Product",
    "RefreshToken",
    "User",
]

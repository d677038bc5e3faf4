# menu/models/__init__.py

from .product import Product, ProductExtra

__all__ = ["Product", "ProductExtra"]

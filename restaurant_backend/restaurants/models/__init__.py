# restaurants/models/__init__.py

from .restaurant import Restaurant
from .table import DiningTable

__all__ = ["Restaurant", "DiningTable"]

# printing/models/__init__.py

from .printer import PrinterConfig

__all__ = ["PrinterConfig"]

# caimport/models/__init__.py

from .app import App
from .options import ImportOptions

__all__ = ["App", "ImportOptions"]

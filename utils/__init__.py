"""
Utility modules for the client intake service.
"""

from .config import Config

__all__ = ["Config"]

"""
Rate My Portfolio backend
GraphQL API for publishing, rating and reviewing portfolios
"""

__version__ = "0.1.0"

from .config import settings

__all__ = ["settings", "__version__"]

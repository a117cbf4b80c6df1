"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.cutoff_rules import router as cutoff_rules_router
from routes.fulfillment import router as fulfillment_router

__all__ = [
    "cutoff_rules_router",
    "fulfillment_router",
]

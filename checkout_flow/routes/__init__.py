"""
Routes Package for Checkout Flow
================================

- checkout.py: Checkout session endpoints (create, view, intents, step events,
  parent-frame messages)

Each module defines a FastAPI APIRouter registered by app_factory.create_app().
"""

from .checkout import checkout_router

__all__ = ["checkout_router"]

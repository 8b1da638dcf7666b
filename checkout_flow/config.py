"""
Configuration Module for Checkout Flow
======================================

This module centralizes the configuration settings, environment variables and
constants used by the checkout orchestrator and its HTTP host. Values are
parsed and typed once at import time; a `.env` file next to the project root
is loaded first.

Configuration Categories:
-------------------------
- **Step Navigation**: Delay before step-viewed analytics fire, fallback login
  page and the order confirmation path.

- **Checkout Loading**: Extra resources requested with the initial checkout load.

- **Session Management**: TTL and cache size for the in-memory checkout session
  cache of the HTTP host.

- **CORS Settings**: Allowed origins for the HTTP host.

Environment Variables:
----------------------
- STEP_VIEW_DELAY_SECONDS: Settle delay before step-viewed fires (default: 0.2)
- DEFAULT_LOGIN_URL: Login page when the store has none (default: "/login.php")
- ORDER_CONFIRMATION_PATH: Appended to the checkout URL (default: "/order-confirmation")
- SESSION_TTL_SECONDS: Session cache TTL (default: 3600)
- SESSION_MAX_CACHE_SIZE: Max cached sessions (default: 1000)
- CORS_ORIGINS: Comma-separated allowed origins (default: "*")

Usage:
------
    from checkout_flow.config import (
        STEP_VIEW_DELAY_SECONDS,
        CHECKOUT_LOAD_INCLUDES,
    )
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(dotenv_path=BASE_DIR / ".env")


# =============================================================================
# Step Navigation Configuration
# =============================================================================

# Seconds to wait after a step is expanded before reporting it as viewed.
# Gives the page time to scroll to the step; newer edits replace pending ones.
STEP_VIEW_DELAY_SECONDS: float = float(os.getenv("STEP_VIEW_DELAY_SECONDS", "0.2"))

# Login page used for sign-out with an empty cart when the store config
# does not provide one
DEFAULT_LOGIN_URL: str = os.getenv("DEFAULT_LOGIN_URL", "/login.php")

# Appended to the current checkout URL after the order is placed
ORDER_CONFIRMATION_PATH: str = os.getenv("ORDER_CONFIRMATION_PATH", "/order-confirmation")


def get_order_confirmation_url(checkout_url: str) -> str:
    """
    Build the order confirmation URL for a checkout page.

    Args:
        checkout_url: URL of the current checkout page

    Returns:
        The checkout URL with ORDER_CONFIRMATION_PATH appended
    """
    return f"{checkout_url}{ORDER_CONFIRMATION_PATH}"


# =============================================================================
# Checkout Loading Configuration
# =============================================================================

# Line item category names are not part of the base checkout resource
CHECKOUT_LOAD_INCLUDES: List[str] = [
    "cart.lineItems.physicalItems.categoryNames",
    "cart.lineItems.digitalItems.categoryNames",
]


def get_checkout_load_options() -> dict:
    """Return the options passed with the initial checkout load request."""
    return {"params": {"include": list(CHECKOUT_LOAD_INCLUDES)}}


# =============================================================================
# Session Management Configuration
# =============================================================================

# How long idle checkout sessions stay in the cache (seconds)
SESSION_TTL_SECONDS: int = int(os.getenv("SESSION_TTL_SECONDS", "3600"))  # 1 hour

# Maximum number of sessions to keep in memory
SESSION_MAX_CACHE_SIZE: int = int(os.getenv("SESSION_MAX_CACHE_SIZE", "1000"))


# =============================================================================
# CORS Configuration
# =============================================================================

_cors_origins_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS: List[str] = [
    origin.strip()
    for origin in _cors_origins_env.split(",")
    if origin.strip()
] or ["*"]

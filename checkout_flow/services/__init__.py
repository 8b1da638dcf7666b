"""
Services Package for Checkout Flow
==================================

Available Services:
-------------------
- **checkout_service**: Interface to the checkout data-loading collaborator,
  plus an in-memory implementation
- **session**: In-memory cache of checkout sessions for the HTTP host
"""

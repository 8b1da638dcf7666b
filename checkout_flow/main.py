"""
ASGI entry point for the checkout flow API.

Run with:
    uvicorn checkout_flow.main:app --reload
"""

# Load environment variables FIRST, before any module imports that need them
from dotenv import load_dotenv
load_dotenv()

from .logging_config import setup_logging
from .app_factory import create_app

setup_logging()

app = create_app()

#!/usr/bin/env python3
"""
Startup script for the checkout flow API.

Usage:
    # Run on the default port
    python run_checkout.py

    # Run with custom port and debug logging
    python run_checkout.py --port 8001 --log-level debug

    # Run with reload for development
    python run_checkout.py --reload
"""

import argparse
import os


def run_server(
    host: str = "0.0.0.0",
    port: int = 8000,
    reload: bool = False,
    log_level: str = None,
) -> None:
    """Run the checkout flow API with uvicorn."""
    if log_level:
        # Read by setup_logging() when the app module is imported
        os.environ["LOG_LEVEL"] = log_level.upper()

    print(f"\n{'=' * 50}")
    print("Starting: Checkout Flow API")
    print(f"Host:     {host}")
    print(f"Port:     {port}")
    print(f"{'=' * 50}\n")

    import uvicorn

    uvicorn.run(
        "checkout_flow.main:app",
        host=host,
        port=port,
        reload=reload,
    )


def main():
    parser = argparse.ArgumentParser(
        description="Run the checkout flow API"
    )
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host to bind to (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        "-p",
        type=int,
        default=int(os.getenv("PORT", "8000")),
        help="Port to run on (default: $PORT or 8000)",
    )
    parser.add_argument(
        "--reload",
        "-r",
        action="store_true",
        help="Enable auto-reload for development",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error", "critical"],
        help="Log level (overrides LOG_LEVEL)",
    )

    args = parser.parse_args()

    run_server(
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()

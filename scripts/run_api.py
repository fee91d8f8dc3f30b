#!/usr/bin/env python3
"""
GRC AI Assist - API entrypoint
Serves the AI endpoints and the in-memory AI audit trail with uvicorn.
"""

import argparse
import os
import sys

import dotenv
dotenv.load_dotenv()

import uvicorn

from src.core.config import debug_enabled


def main():
    parser = argparse.ArgumentParser(description="Run the GRC AI Assist API")
    parser.add_argument("--host", default=os.getenv("API_HOST", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=int(os.getenv("API_PORT", "8000")))
    args = parser.parse_args()

    uvicorn.run(
        "src.api.main:app",
        host=args.host,
        port=args.port,
        log_level="debug" if debug_enabled() else "info",
        reload=debug_enabled(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())

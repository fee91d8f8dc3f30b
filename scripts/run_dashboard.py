#!/usr/bin/env python3
"""
GRC AI Assist - Audit trail dashboard entrypoint
Launches the terminal AI audit trail viewer against a running API.
"""

import argparse
import os
import sys

# Load environment variables from .env file first
import dotenv
dotenv.load_dotenv()


def main():
    """Dashboard entrypoint - resolves the API URL and launches the TUI."""
    parser = argparse.ArgumentParser(description="View the GRC AI audit trail")
    parser.add_argument(
        "--api-url",
        default=os.getenv("GRC_API_URL", "http://localhost:8000"),
        help="Base URL of the GRC AI Assist API (default: $GRC_API_URL or http://localhost:8000)"
    )
    args = parser.parse_args()

    try:
        from tui.main import main as tui_main
        tui_main(api_url=args.api_url)
    except ImportError as e:
        print(f"❌ Failed to import TUI dashboard: {e}")
        print("   Make sure textual is installed: pip install textual")
        return 1
    except KeyboardInterrupt:
        print("\nℹ️  Dashboard interrupted")
        return 0

    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""Report which Revodev settings are configured.

A missing model credential is not fatal: the API starts in canned-response
mode. Use --strict in CI to fail when the credential is absent.

Usage:
  python scripts/check_env.py [--strict]
"""

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

project_root = Path(__file__).parent.parent

REQUIRED_FOR_LIVE_ANSWERS = ["GROQ_API_KEY"]

OPTIONAL_WITH_DEFAULTS = {
    "GROQ_MODEL": "meta-llama/llama-4-scout-17b-16e-instruct",
    "LLM_TIMEOUT": "30",
    "RATE_LIMIT_MAX_REQUESTS": "20",
    "RATE_LIMIT_WINDOW_SECONDS": "3600",
    "HISTORY_MAX_TURNS": "8",
    "MAX_IMAGE_BYTES": "5242880",
    "CORS_ORIGINS": "*",
    "TRUST_PROXY_HEADERS": "false",
}


def check(strict: bool) -> int:
    """Print a configuration report. Returns the process exit code."""
    missing = [name for name in REQUIRED_FOR_LIVE_ANSWERS if not os.environ.get(name)]

    if missing:
        print("\n⚠️  Missing model credentials:")
        for name in missing:
            print(f"   - {name}")
        print("\n   The API will serve canned responses pointing users to Revogreen Energy Hub.")
        print("   For local dev: create a .env file in the project root.\n")
    else:
        print("✅ Model credentials are set; live answers enabled.")

    for name, default in OPTIONAL_WITH_DEFAULTS.items():
        value = os.environ.get(name)
        shown = value if value else f"{default} (default)"
        print(f"   {name} = {shown}")

    if missing and strict:
        return 1
    return 0


def main():
    parser = argparse.ArgumentParser(description="Check Revodev environment configuration.")
    parser.add_argument("--strict", action="store_true", help="Exit non-zero if the model credential is missing")
    args = parser.parse_args()

    load_dotenv(project_root / ".env")
    sys.exit(check(args.strict))


if __name__ == "__main__":
    main()

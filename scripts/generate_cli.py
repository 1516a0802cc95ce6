#!/usr/bin/env python3
# PURPOSE: Command-line runner for the portfolio pipeline.
# CONTEXT: Lets you try a profile against the live model without the API or UI.
#          Needs GEMINI_API_KEY in the environment.

import argparse
import json
import sys

from fincraft.config import Settings
from fincraft.errors import FinCraftError
from fincraft.logging_setup import configure_logging
from fincraft.pipeline import run_pipeline
from fincraft.recommendation_client import RecommendationClient


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Generate a FinCraft portfolio for a profile JSON file.")
    parser.add_argument("profile", help="path to a UserProfile JSON file")
    parser.add_argument("--market-context", default="", help="free-text market context")
    parser.add_argument("--spending-file", help="text file with spending data")
    args = parser.parse_args(argv)

    configure_logging()
    settings = Settings.from_env()

    with open(args.profile, "r", encoding="utf-8") as fh:
        profile = json.load(fh)
    spending = ""
    if args.spending_file:
        with open(args.spending_file, "r", encoding="utf-8") as fh:
            spending = fh.read()

    try:
        client = RecommendationClient(settings)
        out = run_pipeline(
            {"profile": profile, "marketContext": args.market_context, "spendingData": spending},
            client,
            settings,
        )
    except FinCraftError as e:
        print(json.dumps({"error": e.public_message, "detail": str(e)}, indent=2), file=sys.stderr)
        return 1

    print(json.dumps(out, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Application entrypoint — start the API server or inspect the rule table."""

from __future__ import annotations

import argparse
import json
import sys

import uvicorn

from mood_adapt.adaptation.default_rules import create_rule_table
from mood_adapt.config import get_settings
from mood_adapt.logger import setup_logging


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="mood-adapt",
        description="Mood-driven interface adaptation core.",
    )
    sub = parser.add_subparsers(dest="command")

    # ── serve ─────────────────────────────────────────────────
    serve_parser = sub.add_parser("serve", help="Start the API server.")
    serve_parser.add_argument("--host", default=None)
    serve_parser.add_argument("--port", type=int, default=None)
    serve_parser.add_argument("--reload", action="store_true")

    # ── rules ─────────────────────────────────────────────────
    rules_parser = sub.add_parser("rules", help="Print the active rule table as JSON.")
    rules_parser.add_argument("--file", default=None, help="Rule file (overrides settings).")

    args = parser.parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    if args.command == "serve":
        uvicorn.run(
            "mood_adapt.api.server:app",
            host=args.host or settings.api_host,
            port=args.port or settings.api_port,
            reload=args.reload,
        )
    elif args.command == "rules":
        table = create_rule_table(args.file if args.file is not None else settings.rules_file)
        rules = [r.model_dump(mode="json") for r in table.list_rules()]
        print(json.dumps(rules, indent=2))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()

"""
CLI entry point: runs one request through the serverless adapter.

Usage:
    python scripts/invoke.py /health
    python scripts/invoke.py /soil --param lat=-1.29 --param lon=36.82
    python scripts/invoke.py /geocode --param q="Nairobi, Kenya" -v
"""

import argparse
import json
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.api.handler import handler
from src.config import ConfigError, configure_logging, load_settings


def _parse_params(pairs):
    params = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep:
            raise argparse.ArgumentTypeError(f"Expected key=value, got '{pair}'")
        params[key] = value
    return params


def main():
    parser = argparse.ArgumentParser(
        description="Invoke the farm data proxy locally",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/invoke.py /rain-history --param lat=12.97 --param lon=77.59
  python scripts/invoke.py /weather --param lat=12.97 --param lon=77.59
        """,
    )
    parser.add_argument(
        "path",
        help="Route path, e.g. /soil (the function base path is optional)",
    )
    parser.add_argument(
        "--param", "-p", action="append", default=[],
        help="Query parameter as key=value (repeatable)",
    )
    parser.add_argument(
        "--method", default="GET",
        help="HTTP method (default: GET)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    try:
        settings = load_settings()
        params = _parse_params(args.param)
    except (ConfigError, argparse.ArgumentTypeError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging("DEBUG" if args.verbose else settings.log_level)

    event = {
        "httpMethod": args.method.upper(),
        "path": args.path,
        "queryStringParameters": params,
    }
    response = handler(event, None, settings=settings)

    body = response["body"]
    output = {
        "statusCode": response["statusCode"],
        "headers": response["headers"],
        "body": json.loads(body) if body else body,
    }
    print(json.dumps(output, indent=2))
    sys.exit(0 if response["statusCode"] < 400 else 2)


if __name__ == "__main__":
    main()

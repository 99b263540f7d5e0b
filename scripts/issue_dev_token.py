"""
Issue a signed session token for local development.

The token carries the same claims the sign-in provider puts in its session
token, so it can be sent as ``Authorization: Bearer <token>`` or stored in the
session cookie.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from brandboard.auth import Identity
from brandboard.dependencies import get_token_decoder


logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Issue a development session token.")
    parser.add_argument("email")
    parser.add_argument("--name", default="Anonymous")
    parser.add_argument("--image", default=None)
    parser.add_argument(
        "--ttl",
        type=int,
        default=24 * 3600,
        help="Lifetime in seconds (0 for no expiry).",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    extra = {"exp": int(time.time()) + args.ttl} if args.ttl > 0 else {}
    token = get_token_decoder().encode(
        Identity(email=args.email, name=args.name, image=args.image), **extra
    )
    logger.info("Issued token for %s", args.email)
    print(token)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

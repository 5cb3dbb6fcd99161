"""Check a day's token file: header, prize counts and signatures.

Usage:
    python scripts/verify_tokens.py 2025-08-11 --folder tokens
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from core import ValidationError, setup_logger
from services.token_generator import check_distribution

logger = setup_logger(name="", level=logging.INFO)


def main(argv=None) -> int:
    load_dotenv()
    parser = argparse.ArgumentParser(description="Verify a day's token CSV")
    parser.add_argument("day", help="Day to check, YYYY-MM-DD")
    parser.add_argument("--folder", default="tokens")
    parser.add_argument("--secret", default=None, help="Also check signatures (defaults to SIGNING_SECRET)")
    args = parser.parse_args(argv)

    path = Path(args.folder) / f"{args.day}.csv"
    if not path.exists():
        logger.error(f"No token file at {path}")
        return 1

    try:
        report = check_distribution(path, secret=args.secret or os.getenv("SIGNING_SECRET") or None)
    except ValidationError as e:
        logger.error(str(e))
        return 1

    logger.info(f"{args.day}: {report['total']} tokens (expected {report['expected_total']})")
    for key, count in sorted(report["counts"].items()):
        logger.info(f"  {key}: {count}")
    for key, diff in report["mismatches"].items():
        logger.error(f"  {key}: expected {diff['expected']}, found {diff['actual']}")
    if report["unknown"]:
        logger.error(f"  {report['unknown']} tokens with unknown prizes")
    if report["bad_signatures"]:
        logger.error(f"  bad signatures: {', '.join(report['bad_signatures'])}")

    logger.info("OK" if report["ok"] else "FAILED")
    return 0 if report["ok"] else 1


if __name__ == "__main__":
    sys.exit(main())

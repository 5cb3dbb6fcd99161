"""Generate signed wristband tokens, one CSV per event day.

Usage:
    python scripts/generate_tokens.py --days 3 --start 2025-08-11 \
        --base https://example.com/verify --seed 42 --qr-dir qr

The signing secret comes from ``--secret`` or ``SIGNING_SECRET``.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from core import DAILY_DISTRIBUTION, TokenDefaults, setup_logger
from services.token_generator import event_days, generate_day, write_csv, write_qr_codes

logger = setup_logger(name="", level=logging.INFO)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--days", type=int, default=3, help="Number of event days")
    parser.add_argument("--start", required=True, help="First day, YYYY-MM-DD")
    parser.add_argument("--base", required=True, help="Verify URL printed in each QR")
    parser.add_argument("--seed", type=int, default=None, help="Reproducible shuffle seed")
    parser.add_argument("--secret", default=None, help="Signing secret (defaults to SIGNING_SECRET)")
    parser.add_argument("--prefix", default=TokenDefaults.PREFIX)
    parser.add_argument("--out", default="tokens", help="Output folder for CSV files")
    parser.add_argument("--qr-dir", default=None, help="Also write QR PNGs under this folder")
    parser.add_argument("--dry", action="store_true", help="Print a summary without writing files")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    load_dotenv()
    args = parse_args(argv)

    secret = args.secret or os.getenv("SIGNING_SECRET", "")
    if len(secret) < TokenDefaults.MIN_SECRET_LENGTH:
        logger.error(f"Signing secret must be at least {TokenDefaults.MIN_SECRET_LENGTH} characters")
        return 1
    if args.days < 1:
        logger.error("--days must be at least 1")
        return 1

    for day in event_days(args.start, args.days):
        records = generate_day(day, secret, args.base, DAILY_DISTRIBUTION, args.prefix, args.seed)
        if args.dry:
            logger.info(f"[dry] {day}: {len(records)} tokens, first {records[0].id}")
            continue

        path = write_csv(Path(args.out) / f"{day}.csv", records)
        logger.info(f"{day}: wrote {len(records)} tokens to {path}")
        if args.qr_dir:
            write_qr_codes(Path(args.qr_dir) / day, records)

    return 0


if __name__ == "__main__":
    sys.exit(main())

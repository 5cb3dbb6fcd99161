"""Offline batch generation of signed, pre-assigned wristband tokens."""

from __future__ import annotations

import csv
import random
from collections import Counter
from datetime import timedelta
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

import qrcode

from core import DAILY_DISTRIBUTION, TokenDefaults, get_logger
from core.exceptions import ValidationError
from services.signer import create_signed_url, sign
from services.token_store import TokenRecord, read_records
from services.tokens import build_token, parse_day

logger = get_logger(__name__)


def expand_distribution(distribution: Mapping[str, int]) -> List[str]:
    """Turn ``{"agua": 2, "popcorn": 1}`` into ``["agua", "agua", "popcorn"]``."""
    prizes: List[str] = []
    for key, count in distribution.items():
        if count < 0:
            raise ValidationError(f"Negative count for prize {key!r}")
        prizes.extend([key.lower()] * count)
    return prizes


def generate_day(
    day: str,
    secret: str,
    base_url: str,
    distribution: Mapping[str, int] = DAILY_DISTRIBUTION,
    prefix: str = TokenDefaults.PREFIX,
    seed: Optional[int] = None,
) -> List[TokenRecord]:
    """Build one day's tokens: one per prize unit, in shuffled order.

    With a seed the shuffle is reproducible per day (``"<seed>-<day>"``).
    """
    try:
        parse_day(day)
    except ValueError as e:
        raise ValidationError(f"Invalid day {day!r}, expected YYYY-MM-DD") from e
    prizes = expand_distribution(distribution)
    if not prizes:
        raise ValidationError("Distribution has no prizes")

    rng = random.Random(f"{seed}-{day}") if seed is not None else random.SystemRandom()
    rng.shuffle(prizes)

    records = []
    for index, prize in enumerate(prizes, start=1):
        token_id = build_token(prefix, day, index)
        records.append(TokenRecord(
            id=token_id,
            day=day,
            prize=prize,
            sig=sign(token_id, secret),
            url=create_signed_url(token_id, secret, base_url),
        ))
    return records


def event_days(start: str, days: int) -> List[str]:
    first = parse_day(start)
    return [(first + timedelta(days=offset)).isoformat() for offset in range(days)]


def write_csv(path: Path, records: Iterable[TokenRecord]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=TokenDefaults.CSV_HEADER)
        writer.writeheader()
        for record in records:
            writer.writerow(record.to_dict())
    return path


def write_qr_codes(folder: Path, records: Iterable[TokenRecord]) -> int:
    """Write one ``<id>.png`` QR per record; returns how many were written."""
    folder.mkdir(parents=True, exist_ok=True)
    count = 0
    for record in records:
        qr = qrcode.QRCode(
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=2,
        )
        qr.add_data(record.url)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")
        img.save(folder / f"{record.id}.png")
        count += 1
    logger.info(f"Wrote {count} QR codes to {folder}")
    return count


def check_distribution(
    path: Path,
    expected: Mapping[str, int] = DAILY_DISTRIBUTION,
    secret: Optional[str] = None,
) -> Dict[str, object]:
    """Verify a day file against the expected prize counts.

    When ``secret`` is given, every row's signature is checked too.
    """
    records = read_records(path)
    counts = Counter(r.prize for r in records)
    unknown = sum(n for key, n in counts.items() if key not in expected)
    mismatches = {
        key: {"expected": want, "actual": counts.get(key, 0)}
        for key, want in expected.items()
        if counts.get(key, 0) != want
    }
    bad_signatures = []
    if secret:
        bad_signatures = [r.id for r in records if sign(r.id, secret) != r.sig]

    return {
        "total": len(records),
        "expected_total": sum(expected.values()),
        "counts": dict(counts),
        "mismatches": mismatches,
        "unknown": unknown,
        "bad_signatures": bad_signatures,
        "ok": not mismatches and not unknown and not bad_signatures,
    }

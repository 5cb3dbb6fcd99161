"""Read access to the pre-generated per-day token files.

Each event day has one ``<folder>/<YYYY-MM-DD>.csv`` with header
``id,day,prize,sig,url``. Files are written offline and never mutated,
so parsed days are cached.
"""

from __future__ import annotations

import csv
import threading
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, List, Optional

from cachetools import TTLCache

from core import TokenDefaults, get_logger
from core.exceptions import InvalidFormatError, TokenNotFoundError, ValidationError
from services.tokens import token_day

logger = get_logger(__name__)


@dataclass(frozen=True)
class TokenRecord:
    id: str
    day: str
    prize: str
    sig: str
    url: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def read_records(path: Path) -> List[TokenRecord]:
    """Parse one day file.

    Raises:
        ValidationError: If the header is not exactly ``id,day,prize,sig,url``
            or a row does not have one value per column
    """
    records = []
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        header = tuple(reader.fieldnames or ())
        if header != TokenDefaults.CSV_HEADER:
            raise ValidationError(f"Unexpected header in {path}: {','.join(header)}")
        for row in reader:
            if not row.get("id"):
                continue
            # DictReader fills missing columns with None and keys extras under None
            if None in row or any(row[name] is None for name in TokenDefaults.CSV_HEADER):
                raise ValidationError(f"Malformed row at line {reader.line_num} of {path}")
            records.append(TokenRecord(
                id=row["id"].strip(),
                day=row["day"].strip(),
                prize=row["prize"].strip().lower(),
                sig=row["sig"].strip(),
                url=row["url"].strip(),
            ))
    return records


class TokenStore:
    """Day-file lookups with a small TTL cache."""

    def __init__(self, folder: str, cache_ttl: int = 300, cache_size: int = 64) -> None:
        self.folder = Path(folder)
        self._cache: TTLCache = TTLCache(maxsize=cache_size, ttl=cache_ttl)
        self._lock = threading.Lock()

    def path_for(self, day: str) -> Path:
        return self.folder / f"{day}.csv"

    def _load_day(self, day: str) -> Dict[str, TokenRecord]:
        with self._lock:
            cached = self._cache.get(day)
            if cached is not None:
                return cached
            path = self.path_for(day)
            # Missing days are not cached so a newly generated file shows up
            if not path.exists():
                return {}
            records = {r.id: r for r in read_records(path)}
            logger.info(f"Loaded {len(records)} tokens for {day}")
            self._cache[day] = records
            return records

    def list_day(self, day: str) -> List[TokenRecord]:
        return list(self._load_day(day).values())

    def has_day(self, day: str) -> bool:
        return self.path_for(day).exists()

    def available_days(self) -> List[str]:
        if not self.folder.exists():
            return []
        return sorted(p.stem for p in self.folder.glob("*.csv"))

    def find(self, token_id: str) -> Optional[TokenRecord]:
        """Look up a token by scanning the file for the day in its id."""
        try:
            day = token_day(token_id)
        except InvalidFormatError:
            return None
        return self._load_day(day).get(token_id)

    def get(self, token_id: str) -> TokenRecord:
        record = self.find(token_id)
        if record is None:
            raise TokenNotFoundError(f"No token record for {token_id!r}")
        return record

    def metadata(self, token_id: str) -> Optional[Dict[str, str]]:
        """Metadata lookup for signature schemes that sign more than the id."""
        record = self.find(token_id)
        return record.to_dict() if record else None

    def invalidate(self, day: Optional[str] = None) -> None:
        with self._lock:
            if day is None:
                self._cache.clear()
            else:
                self._cache.pop(day, None)

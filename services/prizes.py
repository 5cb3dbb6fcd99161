"""Prize catalog: the fixed, ordered list of wheel segments."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

from core import get_logger
from core.exceptions import ConfigurationError

logger = get_logger(__name__)


@dataclass(frozen=True)
class Prize:
    """A wheel segment.

    ``weight`` is a relative weight (or remaining stock); weights need not
    sum to 1 and are normalized at draw time.
    """
    id: int
    key: str
    name: str
    color: str
    weight: float
    retry: bool = False
    emoji: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


DEFAULT_PRIZES = (
    Prize(1, "trident", "Trident", "#FF4D8D", 0.145, emoji="🍬"),
    Prize(2, "cigarrillos", "Cigarrillos", "#9B4DFF", 0.145, emoji="🚬"),
    Prize(3, "cerebritos", "Cerebritos", "#4D9EFF", 0.145, emoji="🍭"),
    Prize(4, "popcorn", "Popcorn", "#31D2F2", 0.145, emoji="🍿"),
    Prize(5, "agua", "Agua", "#4DFFB8", 0.145, emoji="💧"),
    Prize(6, "chupetines", "Chupetines", "#FFD93D", 0.245, emoji="🍭"),
    Prize(7, "nuevo-intento", "Un Nuevo Intento", "#FB923C", 0.0, retry=True, emoji="🔄"),
)


class PrizeCatalog:
    """Immutable catalog loaded once at startup."""

    def __init__(self, prizes: Iterable[Prize]) -> None:
        self._prizes = tuple(prizes)
        self._validate()
        self._by_id: Dict[int, Prize] = {p.id: p for p in self._prizes}
        self._by_key: Dict[str, Prize] = {p.key: p for p in self._prizes}

    def _validate(self) -> None:
        if len(self._prizes) < 2:
            raise ConfigurationError("Prize catalog needs at least 2 entries")
        ids = [p.id for p in self._prizes]
        keys = [p.key for p in self._prizes]
        if len(set(ids)) != len(ids) or len(set(keys)) != len(keys):
            raise ConfigurationError("Prize ids and keys must be unique")
        if sum(1 for p in self._prizes if p.retry) > 1:
            raise ConfigurationError("Only one prize may be flagged as retry")
        if any(p.weight < 0 for p in self._prizes):
            raise ConfigurationError("Prize weights must be non-negative")

    def __len__(self) -> int:
        return len(self._prizes)

    def __iter__(self):
        return iter(self._prizes)

    def get_catalog(self, overrides: Optional[Mapping[int, float]] = None) -> List[Prize]:
        """Return a fresh list with per-id weight overrides applied.

        The base catalog is never touched.
        """
        overrides = overrides or {}
        return [
            replace(p, weight=overrides[p.id]) if p.id in overrides else p
            for p in self._prizes
        ]

    def find(self, prize_id: int) -> Optional[Prize]:
        return self._by_id.get(prize_id)

    def find_by_key(self, key: str) -> Optional[Prize]:
        return self._by_key.get((key or "").strip().lower())

    @property
    def retry_prize(self) -> Optional[Prize]:
        return next((p for p in self._prizes if p.retry), None)


def _prize_from_dict(raw: Mapping) -> Prize:
    return Prize(
        id=int(raw["id"]),
        key=str(raw["key"]).lower(),
        name=str(raw["name"]),
        color=str(raw.get("color", "#CCCCCC")),
        weight=float(raw.get("weight", raw.get("stock", 0))),
        retry=bool(raw.get("retry", False)),
        emoji=str(raw.get("emoji", "")),
    )


def load_catalog(path: Optional[str] = None) -> PrizeCatalog:
    """Load the catalog from a JSON list, or fall back to the built-in one.

    Raises:
        ConfigurationError: If the file is unreadable or malformed
    """
    if not path:
        return PrizeCatalog(DEFAULT_PRIZES)

    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(raw, list):
            raise ValueError("expected a JSON list of prizes")
        prizes = [_prize_from_dict(item) for item in raw]
    except (OSError, ValueError, KeyError, TypeError) as e:
        raise ConfigurationError(f"Cannot load prize catalog from {path}: {e}") from e

    logger.info(f"Loaded {len(prizes)} prizes from {path}")
    return PrizeCatalog(prizes)

"""Play orchestration: authenticate, gate, guard, resolve the prize.

Production play always honors the prize pre-assigned in the day's token
file; the wheel only reveals it. Live weighted draws happen in demo mode
alone.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from core import get_logger
from core.exceptions import (
    AlreadyPlayedError,
    ConfigurationError,
    InvalidFormatError,
    SignatureMismatchError,
    TokenNotFoundError,
    ValidationError,
)
from services.event_gate import EventGate
from services.operator_settings import OperatorSettings
from services.play_state import PlayStateGuard
from services.prizes import Prize, PrizeCatalog
from services.selector import WeightedSelector
from services.signer import TokenVerifier
from services.token_store import TokenRecord, TokenStore
from services.tokens import parse_token_date

logger = get_logger(__name__)


@dataclass(frozen=True)
class PlayResult:
    token_id: str
    prize: Prize
    is_retry: bool = False
    retries_left: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "id": self.token_id,
            "prize": self.prize.to_dict(),
            "retry": self.is_retry,
            "retriesLeft": self.retries_left,
        }


class PlayService:
    """Ties the token, gate, guard and selector components together."""

    def __init__(
        self,
        verifier: TokenVerifier,
        gate: EventGate,
        token_store: TokenStore,
        catalog: PrizeCatalog,
        selector: Optional[WeightedSelector] = None,
    ) -> None:
        self.verifier = verifier
        self.gate = gate
        self.token_store = token_store
        self.catalog = catalog
        self.selector = selector or WeightedSelector()

    def authenticate(self, token_id: str, signature: str) -> TokenRecord:
        """Return the token's record or raise ``SignatureMismatchError``.

        Format errors, bad signatures and unknown ids all collapse into the
        same exception so callers cannot tell them apart.
        """
        try:
            parse_token_date(token_id)
            self.verifier.authenticate(token_id, signature)
            return self.token_store.get(token_id)
        except (InvalidFormatError, TokenNotFoundError) as e:
            logger.info(f"Token rejected: {e}")
            raise SignatureMismatchError(str(e)) from e
        except ValidationError as e:
            # Unreadable day file; the visitor still gets the uniform rejection
            logger.error(f"Token store error while checking {token_id!r}: {e}")
            raise SignatureMismatchError(str(e)) from e

    def is_valid(self, token_id: str, signature: str) -> bool:
        try:
            self.authenticate(token_id, signature)
        except SignatureMismatchError:
            return False
        return True

    def assigned_prize(self, record: TokenRecord) -> Prize:
        prize = self.catalog.find_by_key(record.prize)
        if prize is None:
            raise ConfigurationError(
                f"Token {record.id} references unknown prize {record.prize!r}"
            )
        return prize

    def play(self, token_id: str, signature: str, guard: PlayStateGuard) -> PlayResult:
        """Resolve the single result for a wristband.

        Raises:
            SignatureMismatchError: Token failed authentication
            EventNotStartedError: Gate still closed
            AlreadyPlayedError: Guard already holds a final result
        """
        record = self.authenticate(token_id, signature)
        self.gate.ensure_started()
        if guard.has_played(token_id):
            raise AlreadyPlayedError(f"Token {token_id} already played")

        prize = self.selector.draw(
            self.catalog.get_catalog(),
            forced_prize_id=self.assigned_prize(record).id,
        )
        guard.mark_played(token_id)
        logger.info(f"Token {token_id} revealed prize {prize.key}")
        return PlayResult(token_id, prize)

    def demo_spin(
        self,
        demo_id: str,
        guard: PlayStateGuard,
        settings: OperatorSettings,
    ) -> PlayResult:
        """Live weighted draw with the retry segment.

        Once the retry budget is spent the retry segment is disabled, so
        the spin after a retry always lands on a real prize.
        """
        if guard.has_played(demo_id):
            raise AlreadyPlayedError(f"Demo id {demo_id} already played")

        allow_retry = guard.can_retry(demo_id, settings.max_retries)
        prize = self.selector.draw(
            self.catalog.get_catalog(),
            retry_weight=settings.retry_probability,
            suppress_retry=not allow_retry,
        )

        if prize.retry:
            used = guard.record_retry(demo_id, settings.max_retries)
            logger.info(f"Demo id {demo_id} drew a retry ({used}/{settings.max_retries})")
            return PlayResult(demo_id, prize, is_retry=True, retries_left=settings.max_retries - used)

        guard.mark_played(demo_id)
        return PlayResult(demo_id, prize)

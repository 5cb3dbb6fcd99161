"""Services package."""

from .tokens import Token, build_token, parse_day, parse_token_date, is_token_id
from .signer import SignatureScheme, TokenVerifier, sign, verify, create_signed_url
from .prizes import Prize, PrizeCatalog, load_catalog
from .selector import WeightedSelector
from .event_gate import EventGate, TimeLeft, time_until_event
from .play_state import PlayStateGuard, PlayState, InMemoryStorage, SessionStorage
from .rate_limiter import RateLimiter
from .token_store import TokenRecord, TokenStore
from .operator_settings import OperatorSettings, SettingsCodec, parse_settings
from .play_service import PlayService, PlayResult

__all__ = [
    "Token",
    "build_token",
    "parse_day",
    "parse_token_date",
    "is_token_id",
    "SignatureScheme",
    "TokenVerifier",
    "sign",
    "verify",
    "create_signed_url",
    "Prize",
    "PrizeCatalog",
    "load_catalog",
    "WeightedSelector",
    "EventGate",
    "TimeLeft",
    "time_until_event",
    "PlayStateGuard",
    "PlayState",
    "InMemoryStorage",
    "SessionStorage",
    "RateLimiter",
    "TokenRecord",
    "TokenStore",
    "OperatorSettings",
    "SettingsCodec",
    "parse_settings",
    "PlayService",
    "PlayResult",
]

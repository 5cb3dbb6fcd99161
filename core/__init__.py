"""Core application components."""

from core.logger import setup_logger, get_logger
from core.constants import (
    TokenDefaults,
    PrizeDefaults,
    EventDefaults,
    RateLimitDefaults,
    CookieDefaults,
    EventMode,
    SpinOutcome,
    DAILY_DISTRIBUTION,
)
from core.exceptions import (
    ApplicationError,
    ConfigurationError,
    TokenError,
    InvalidFormatError,
    SignatureMismatchError,
    TokenNotFoundError,
    ServiceError,
    NoPrizesAvailableError,
    AlreadyPlayedError,
    EventNotStartedError,
    ValidationError,
    RateLimitError,
    AuthorizationError,
)

__all__ = [
    # Logging
    'setup_logger',
    'get_logger',
    # Constants
    'TokenDefaults',
    'PrizeDefaults',
    'EventDefaults',
    'RateLimitDefaults',
    'CookieDefaults',
    'EventMode',
    'SpinOutcome',
    'DAILY_DISTRIBUTION',
    # Exceptions
    'ApplicationError',
    'ConfigurationError',
    'TokenError',
    'InvalidFormatError',
    'SignatureMismatchError',
    'TokenNotFoundError',
    'ServiceError',
    'NoPrizesAvailableError',
    'AlreadyPlayedError',
    'EventNotStartedError',
    'ValidationError',
    'RateLimitError',
    'AuthorizationError',
]

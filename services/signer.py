"""HMAC-SHA256 token signing and verification.

Verification walks an ordered tuple of signature schemes and accepts the
first one that matches. The current scheme signs the bare token id. The
legacy scheme signs ``id|day|prizeKey`` and exists only so wristbands
printed before the scheme change keep working; it must stay behind the
``LEGACY_SIGNATURES_ENABLED`` flag and be removed once those tokens expire.
"""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Sequence
from urllib.parse import urlencode

from core import get_logger
from core.constants import TokenDefaults
from core.exceptions import SignatureMismatchError
from core.logger import signature_head

logger = get_logger(__name__)

# Metadata lookup used by schemes that sign more than the id
MetadataLookup = Callable[[str], Optional[Mapping[str, str]]]


@dataclass(frozen=True)
class SignatureScheme:
    """A named way to turn a token id (plus metadata) into signed bytes.

    ``canonicalize`` returns ``None`` when the scheme cannot be applied,
    e.g. the legacy scheme for an id with no CSV row.
    """
    name: str
    canonicalize: Callable[[str, Optional[Mapping[str, str]]], Optional[str]]
    needs_metadata: bool = False


def _current_canonical(token_id: str, metadata: Optional[Mapping[str, str]]) -> Optional[str]:
    return token_id


def _legacy_canonical(token_id: str, metadata: Optional[Mapping[str, str]]) -> Optional[str]:
    if not metadata:
        return None
    day = metadata.get("day")
    prize = metadata.get("prize")
    if not day or not prize:
        return None
    return f"{token_id}|{day}|{prize.lower()}"


CURRENT_SCHEME = SignatureScheme("current", _current_canonical)
LEGACY_SCHEME = SignatureScheme("legacy", _legacy_canonical, needs_metadata=True)
DEFAULT_SCHEMES = (CURRENT_SCHEME,)


def sign(token_id: str, secret: str) -> str:
    """Return the lowercase hex HMAC-SHA256 of ``token_id``."""
    return hmac.new(secret.encode("utf-8"), token_id.encode("utf-8"), hashlib.sha256).hexdigest()


def _decode_hex(value: str) -> Optional[bytes]:
    try:
        return bytes.fromhex(value)
    except (TypeError, ValueError):
        return None


def _matches(expected_hex: str, provided: bytes) -> bool:
    return hmac.compare_digest(bytes.fromhex(expected_hex), provided)


def matching_scheme(
    token_id: str,
    signature: str,
    secret: str,
    schemes: Sequence[SignatureScheme] = DEFAULT_SCHEMES,
    metadata: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """Return the name of the first scheme that verifies, or ``None``."""
    if not token_id or not signature or not secret:
        return None
    if len(signature) != TokenDefaults.SIGNATURE_HEX_LENGTH:
        return None
    provided = _decode_hex(signature)
    if provided is None:
        return None

    for scheme in schemes:
        canonical = scheme.canonicalize(token_id, metadata)
        if canonical is None:
            continue
        if _matches(sign(canonical, secret), provided):
            return scheme.name
    return None


def verify(
    token_id: str,
    signature: str,
    secret: str,
    schemes: Sequence[SignatureScheme] = DEFAULT_SCHEMES,
    metadata: Optional[Mapping[str, str]] = None,
) -> bool:
    """Constant-time signature check. Never raises on malformed input."""
    return matching_scheme(token_id, signature, secret, schemes, metadata) is not None


def create_signed_url(token_id: str, secret: str, base_url: str) -> str:
    """Build the URL encoded into a wristband QR code."""
    query = urlencode({"id": token_id, "sig": sign(token_id, secret)})
    separator = "&" if "?" in base_url else "?"
    return f"{base_url}{separator}{query}"


class TokenVerifier:
    """Binds a secret, the accepted schemes and a metadata lookup."""

    def __init__(
        self,
        secret: str,
        *,
        legacy_enabled: bool = False,
        metadata_lookup: Optional[MetadataLookup] = None,
    ) -> None:
        self._secret = secret
        self._metadata_lookup = metadata_lookup
        self.schemes = (CURRENT_SCHEME, LEGACY_SCHEME) if legacy_enabled else DEFAULT_SCHEMES
        if legacy_enabled:
            logger.warning(
                "Legacy id|day|prize signatures are accepted; disable "
                "LEGACY_SIGNATURES_ENABLED once old wristbands are retired"
            )

    def _metadata(self, token_id: str) -> Optional[Mapping[str, str]]:
        if self._metadata_lookup is None:
            return None
        if not any(scheme.needs_metadata for scheme in self.schemes):
            return None
        return self._metadata_lookup(token_id)

    def verify(self, token_id: str, signature: str) -> bool:
        scheme = matching_scheme(
            token_id, signature, self._secret, self.schemes, self._metadata(token_id)
        )
        if scheme == LEGACY_SCHEME.name:
            logger.warning(f"Token {token_id} accepted through legacy signature scheme")
        return scheme is not None

    def authenticate(self, token_id: str, signature: str) -> None:
        """Raise ``SignatureMismatchError`` unless the token verifies."""
        if not self.verify(token_id, signature):
            logger.info(f"Rejected token {token_id!r} (sig {signature_head(signature)})")
            raise SignatureMismatchError(f"Signature mismatch for {token_id!r}")

    def sign(self, token_id: str) -> str:
        return sign(token_id, self._secret)

    def signed_url(self, token_id: str, base_url: str) -> str:
        return create_signed_url(token_id, self._secret, base_url)

    def explain(self, token_id: str, signature: str) -> Dict[str, Any]:
        """Operator-only diagnostics. Never exposes a full expected signature."""
        head = TokenDefaults.DEBUG_HEAD_LENGTH
        current = sign(token_id, self._secret)
        return {
            "id": token_id,
            "providedSigHead": signature[:head],
            "providedLen": len(signature),
            "currentSigHead": current[:head],
            "matchCurrent": verify(token_id, signature, self._secret),
            "legacyChecked": LEGACY_SCHEME in self.schemes,
            "matchedScheme": matching_scheme(
                token_id, signature, self._secret, self.schemes, self._metadata(token_id)
            ),
            "secretLen": len(self._secret),
        }

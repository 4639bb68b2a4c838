"""Display-only decoding of compact tokens.

Nothing here verifies a signature. The output is meant for log lines and
debugging pages, never for deciding whether a token can be trusted.
"""

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal

logger = logging.getLogger(__name__)

TokenKind = Literal["signed", "encrypted", "unknown", "error"]

TIMESTAMP_CLAIMS = ("exp", "iat", "nbf")


@dataclass(frozen=True)
class DecodedToken:
    kind: TokenKind
    claims: dict[str, Any] | None = None


def _b64url_decode(segment: str) -> bytes:
    padding = "=" * (-len(segment) % 4)

    return base64.urlsafe_b64decode(segment + padding)


def decode_token(token: str) -> DecodedToken:
    """Classify ``token`` and, for a signed JWT, return its payload claims.

    A five segment token is a JWE and cannot be read without the key, a
    three segment token is a JWS whose middle segment is the JSON payload.
    """
    parts = token.split(".")

    if len(parts) == 5:
        return DecodedToken(kind="encrypted")

    if len(parts) != 3:
        return DecodedToken(kind="unknown")

    try:
        claims = json.loads(_b64url_decode(parts[1]))
    except (binascii.Error, ValueError) as e:
        logger.warning(f"Failed to decode token payload: {e}")

        return DecodedToken(kind="error")

    if not isinstance(claims, dict):
        logger.warning("Token payload is not a JSON object")

        return DecodedToken(kind="error")

    return DecodedToken(kind="signed", claims=claims)


def format_claims(claims: dict[str, Any] | None, indent: str = "     ") -> str:
    if not claims:
        return f"{indent}(unable to decode)"

    lines = []

    for key, value in claims.items():
        display = value

        if key in TIMESTAMP_CLAIMS and isinstance(value, (int, float)):
            try:
                moment = datetime.fromtimestamp(value, tz=timezone.utc)
            except (OverflowError, OSError, ValueError):
                display = value
            else:
                display = f"{value} ({moment.isoformat()})"
        elif isinstance(value, (dict, list)):
            display = json.dumps(value)

        lines.append(f"{indent}{key}: {display}")

    return "\n".join(lines)


def describe_token(token: str) -> str:
    decoded = decode_token(token)

    if decoded.kind == "signed":
        return format_claims(decoded.claims)

    if decoded.kind == "encrypted":
        return "     (JWE encrypted token - cannot decode without decryption key)"

    return "     (unable to decode)"

import base64
import hashlib
import secrets

VERIFIER_BYTES = 32
STATE_BYTES = 16


def _urlsafe(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def generate_code_verifier() -> str:
    """Generate a PKCE code verifier (43 characters for 32 random bytes)."""
    return _urlsafe(secrets.token_bytes(VERIFIER_BYTES))


def calculate_s256_challenge(verifier: str) -> str:
    sha256_digest = hashlib.sha256(verifier.encode("ascii")).digest()

    return _urlsafe(sha256_digest)


def generate_pkce_pair() -> tuple[str, str]:
    verifier = generate_code_verifier()

    return verifier, calculate_s256_challenge(verifier)


def generate_state() -> str:
    return _urlsafe(secrets.token_bytes(STATE_BYTES))

"""
Ed25519 key management, principal derivation and JWS token creation.

Handles key generation and loading, derives self-authenticating principals
and account identifiers from public keys, and creates compact JWS
(header.payload.signature) tokens used to authenticate with the accounts
and ledger services (via joserfc).
"""

from __future__ import annotations

import base64
import hashlib
import json
import zlib
from typing import TYPE_CHECKING

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from joserfc import jws
from joserfc.jwk import OKPKey

if TYPE_CHECKING:
    from pathlib import Path

SELF_AUTHENTICATING_TAG = b"\x02"
ACCOUNT_DOMAIN_SEPARATOR = b"\x0aaccount-id"
SUBACCOUNT_LENGTH = 32


def generate_keypair(handle: str, keys_dir: Path) -> tuple[Ed25519PrivateKey, Ed25519PublicKey]:
    """Generate a new Ed25519 keypair and persist to disk.

    Creates {handle}.key (private) and {handle}.pub (public) in PEM format.

    Args:
        handle: Name used as filename prefix.
        keys_dir: Directory to write key files into.

    Returns:
        Tuple of (private_key, public_key).
    """
    keys_dir.mkdir(parents=True, exist_ok=True)

    private_key = Ed25519PrivateKey.generate()
    public_key = private_key.public_key()

    (keys_dir / f"{handle}.key").write_bytes(
        private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
    )
    (keys_dir / f"{handle}.pub").write_bytes(
        public_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    )

    return private_key, public_key


def load_private_key(path: Path) -> Ed25519PrivateKey:
    """Load an Ed25519 private key from a PEM file.

    Raises:
        FileNotFoundError: If the key file does not exist.
        ValueError: If the file does not contain a valid Ed25519 private key.
    """
    key_bytes = path.read_bytes()
    private_key = serialization.load_pem_private_key(key_bytes, password=None)
    if not isinstance(private_key, Ed25519PrivateKey):
        msg = f"Expected Ed25519 private key, got {type(private_key).__name__}"
        raise ValueError(msg)
    return private_key


# ---------------------------------------------------------------------------
# Principals and account identifiers
# ---------------------------------------------------------------------------


def principal_from_public_key(public_key: Ed25519PublicKey) -> bytes:
    """Self-authenticating principal: SHA-224 of the DER public key plus a 0x02 tag."""
    der = public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return hashlib.sha224(der).digest() + SELF_AUTHENTICATING_TAG


def principal_to_text(principal: bytes) -> str:
    """Encode a principal as CRC32-prefixed lowercase base32 in dash-separated groups of five."""
    checksum = zlib.crc32(principal).to_bytes(4, "big")
    encoded = base64.b32encode(checksum + principal).decode("ascii").rstrip("=").lower()
    return "-".join(encoded[i : i + 5] for i in range(0, len(encoded), 5))


def principal_from_text(text: str) -> bytes:
    """Decode and checksum-verify a textual principal.

    Raises:
        ValueError: If the text is malformed or the checksum does not match.
    """
    compact = text.replace("-", "").upper()
    padding = -len(compact) % 8
    try:
        raw = base64.b32decode(compact + "=" * padding)
    except ValueError as exc:
        msg = f"Invalid principal text: {text}"
        raise ValueError(msg) from exc
    if len(raw) < 4:
        msg = f"Invalid principal text: {text}"
        raise ValueError(msg)
    checksum, principal = raw[:4], raw[4:]
    if zlib.crc32(principal).to_bytes(4, "big") != checksum:
        msg = f"Principal checksum mismatch: {text}"
        raise ValueError(msg)
    return principal


def account_identifier(principal: bytes, subaccount: bytes | None = None) -> str:
    """Derive the hex account identifier for a principal and optional 32-byte subaccount."""
    if subaccount is None:
        subaccount = bytes(SUBACCOUNT_LENGTH)
    if len(subaccount) != SUBACCOUNT_LENGTH:
        msg = f"Subaccount must be {SUBACCOUNT_LENGTH} bytes, got {len(subaccount)}"
        raise ValueError(msg)
    digest = hashlib.sha224(ACCOUNT_DOMAIN_SEPARATOR + principal + subaccount).digest()
    checksum = zlib.crc32(digest).to_bytes(4, "big")
    return (checksum + digest).hex()


# ---------------------------------------------------------------------------
# JWS
# ---------------------------------------------------------------------------

def _b64url_encode(data: bytes) -> str:
    """Base64url-encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _signing_key(private_key: Ed25519PrivateKey) -> OKPKey:
    """Build an OKP JWK for joserfc from an Ed25519 private key."""
    jwk_dict: dict[str, str | list[str]] = {
        "kty": "OKP",
        "crv": "Ed25519",
        "d": _b64url_encode(private_key.private_bytes_raw()),
        "x": _b64url_encode(private_key.public_key().public_bytes_raw()),
    }
    return OKPKey.import_key(jwk_dict)


def _verification_key(public_key: Ed25519PublicKey) -> OKPKey:
    """Build a public OKP JWK for joserfc from an Ed25519 public key."""
    jwk_dict: dict[str, str | list[str]] = {
        "kty": "OKP",
        "crv": "Ed25519",
        "x": _b64url_encode(public_key.public_bytes_raw()),
    }
    return OKPKey.import_key(jwk_dict)


def create_jws(
    payload: dict[str, object],
    private_key: Ed25519PrivateKey,
    kid: str | None = None,
) -> str:
    """Create a compact JWS token (header.payload.signature) using EdDSA.

    Args:
        payload: Dictionary to sign as the JWS payload.
        private_key: Ed25519 private key used for signing.
        kid: Optional key ID (the signer's principal) for the JWS header.

    Returns:
        Compact JWS string.
    """
    protected: dict[str, str] = {"alg": "EdDSA"}
    if kid is not None:
        protected["kid"] = kid
    payload_bytes = json.dumps(payload, separators=(",", ":"), sort_keys=True).encode()
    return jws.serialize_compact(
        protected, payload_bytes, _signing_key(private_key), algorithms=["EdDSA"]
    )


def verify_jws(token: str, public_key: Ed25519PublicKey) -> dict[str, object]:
    """Verify a compact JWS token locally and return the decoded payload.

    Raises:
        ValueError: If the token format or its payload is invalid.
        joserfc.errors.BadSignatureError: If the signature is invalid.
    """
    if len(token.split(".")) != 3:
        msg = "Invalid JWS format: expected 3 dot-separated parts"
        raise ValueError(msg)

    obj = jws.deserialize_compact(token, _verification_key(public_key), algorithms=["EdDSA"])
    payload = json.loads(obj.payload)
    if not isinstance(payload, dict):
        msg = "JWS payload must be a JSON object"
        raise ValueError(msg)
    return payload

"""
Google ID token payload decoding.

The credential handed to the sign-in callback is a JWT: three dot-separated
Base64URL segments. Only the middle (payload) segment is read here; the
portal uses it for display name and email, never for authorization.
"""

import base64
import binascii
import json

from pydantic import ValidationError

from feedback_portal.schemas.identity_schema import GoogleIdentity

_URLSAFE_TO_STANDARD = str.maketrans("-_", "+/")


class IdentityDecodeError(ValueError):
    """Raised when a credential cannot be decoded into an identity."""


def _decode_segment(segment: str) -> bytes:
    standard = segment.translate(_URLSAFE_TO_STANDARD)
    standard += "=" * (-len(standard) % 4)
    try:
        return base64.b64decode(standard, validate=True)
    except (binascii.Error, ValueError) as e:
        raise IdentityDecodeError(f"Credential payload is not valid Base64: {e}") from e


def decode_credential(credential: str) -> GoogleIdentity:
    """Decode the payload segment of a Google credential.

    Raises:
        IdentityDecodeError: If the token is malformed or lacks an email.
    """
    if not isinstance(credential, str) or not credential:
        raise IdentityDecodeError("No credential received from Google")

    segments = credential.split(".")
    if len(segments) != 3 or not segments[1]:
        raise IdentityDecodeError(
            f"Credential must have 3 segments, got {len(segments)}"
        )

    raw = _decode_segment(segments[1])
    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise IdentityDecodeError(f"Credential payload is not JSON: {e}") from e

    if not isinstance(payload, dict):
        raise IdentityDecodeError("Credential payload is not an object")

    try:
        return GoogleIdentity.model_validate(payload)
    except ValidationError as e:
        raise IdentityDecodeError(f"Credential payload is missing profile fields: {e}") from e

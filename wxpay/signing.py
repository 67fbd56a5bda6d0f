from __future__ import annotations

import hashlib
import hmac
from collections.abc import Mapping

from wxpay.canonical import canonical_bytes
from wxpay.constants import SIGN_FIELD, SignType


def sign(params: Mapping[str, str], secret: str, sign_type: SignType | str = SignType.MD5) -> str:
    """Produce the upper-case hex signature of *params* keyed by *secret*.

    ``MD5`` digests the canonical bytes directly (the secret is only the
    trailing ``key=`` segment); ``HMAC-SHA256`` additionally uses the secret
    as the HMAC key.
    """
    sign_type = SignType(sign_type)
    message = canonical_bytes(params, secret)
    if sign_type is SignType.HMAC_SHA256:
        digest = hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()
    else:
        digest = hashlib.md5(message).hexdigest()
    return digest.upper()


def verify(params: Mapping[str, str], secret: str, sign_type: SignType | str = SignType.MD5) -> bool:
    """Check the ``sign`` field of *params*. Absent signature never verifies."""
    received = params.get(SIGN_FIELD)
    if received is None:
        return False
    expected = sign(params, secret, sign_type)
    return hmac.compare_digest(expected.encode("utf-8"), received.upper().encode("utf-8"))


def attach_signature(params: dict[str, str], secret: str, sign_type: SignType | str = SignType.MD5) -> dict[str, str]:
    """Sign *params* and store the result under ``sign``. Returns the same dict."""
    params[SIGN_FIELD] = sign(params, secret, sign_type)
    return params

"""Canonical form of a parameter set, used as digest input for signatures."""

from __future__ import annotations

from collections.abc import Mapping

from wxpay.constants import SIGN_FIELD, SIGN_KEY_FIELD


def canonical_string(params: Mapping[str, str], secret: str) -> str:
    """Return ``k1=v1&k2=v2&...&key=<secret>`` over the sorted keys of *params*.

    The ``sign`` field is never part of the canonical form, and keys whose
    value is empty are dropped entirely (not rendered as ``k=``). The gateway
    computes the same string, so any deviation breaks verification.
    """
    parts = []
    for k in sorted(k for k in params if k != SIGN_FIELD):
        v = params[k]
        if v:
            parts.append(f"{k}={v}&")
    parts.append(f"{SIGN_KEY_FIELD}={secret}")
    return "".join(parts)


def canonical_bytes(params: Mapping[str, str], secret: str) -> bytes:
    return canonical_string(params, secret).encode("utf-8")

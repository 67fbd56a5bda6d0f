"""Python client for the WeChat Pay merchant API (XML over HTTPS).

- Canonical form + MD5 / HMAC-SHA256 request signing and response verification.
- Merchant identity and PKCS#12 client certificates for mutual TLS endpoints.
- ``WxPayClient`` endpoint helpers (unified order, refund, bill download, ...).
"""

from __future__ import annotations

__all__ = [
    "Account",
    "ConfigurationError",
    "MalformedResponse",
    "RequestKind",
    "SignType",
    "TransportError",
    "TrustFailure",
    "Verification",
    "WxPayClient",
    "WxPayError",
    "canonical_bytes",
    "map_to_xml",
    "sign",
    "verify",
    "xml_to_map",
]

from wxpay.account import Account
from wxpay.canonical import canonical_bytes
from wxpay.client import WxPayClient
from wxpay.constants import RequestKind, SignType, Verification
from wxpay.errors import ConfigurationError, MalformedResponse, TransportError, TrustFailure, WxPayError
from wxpay.signing import sign, verify
from wxpay.xmlcodec import map_to_xml, xml_to_map

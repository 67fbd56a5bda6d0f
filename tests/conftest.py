from __future__ import annotations

import ssl
import sys
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

import httpx
import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import NameOID


REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

from wxpay.account import Account  # noqa: E402
from wxpay.client import WxPayClient  # noqa: E402
from wxpay.constants import SignType  # noqa: E402
from wxpay.signing import attach_signature  # noqa: E402
from wxpay.xmlcodec import map_to_xml, xml_to_map  # noqa: E402

APP_ID = "wx2421b1c4370ec43b"
MCH_ID = "10000100"
API_KEY = "192006250b4c09247ec02edce69f6a2d"


def signed_xml(fields: dict[str, str], api_key: str = API_KEY, sign_type: SignType = SignType.MD5) -> str:
    return map_to_xml(attach_signature(dict(fields), api_key, sign_type))


class FakeGateway:
    """Records outgoing requests and answers with a configurable body.

    By default every request gets a signed ``SUCCESS`` response.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.ssl_verify_seen: list[ssl.SSLContext | bool] = []
        self.reply: Callable[[httpx.Request], httpx.Response] = self._signed_success

    @staticmethod
    def _signed_success(request: httpx.Request) -> httpx.Response:
        req = xml_to_map(request.content)
        body = signed_xml(
            {"return_code": "SUCCESS", "return_msg": "OK", "result_code": "SUCCESS", "nonce_str": "resp-nonce"},
            sign_type=SignType(req.get("sign_type") or "MD5"),
        )
        return httpx.Response(200, text=body)

    def reply_with(self, body: str, status_code: int = 200) -> None:
        self.reply = lambda _request: httpx.Response(status_code, text=body)

    def transport_factory(self, ssl_verify: ssl.SSLContext | bool) -> httpx.BaseTransport:
        self.ssl_verify_seen.append(ssl_verify)
        return httpx.MockTransport(self.handler)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.reply(request)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def last_params(self) -> dict[str, str]:
        return xml_to_map(self.last_request.content)


@pytest.fixture()
def account() -> Account:
    return Account(APP_ID, MCH_ID, API_KEY)


@pytest.fixture()
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture()
def client(account: Account, gateway: FakeGateway) -> WxPayClient:
    return WxPayClient(account, transport_factory=gateway.transport_factory)


@pytest.fixture(scope="session")
def p12_data() -> bytes:
    """A self-signed client certificate archived the way the merchant platform issues it."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    name = x509.Name([
        x509.NameAttribute(NameOID.COMMON_NAME, "wxpay test merchant"),
        x509.NameAttribute(NameOID.ORGANIZATIONAL_UNIT_NAME, MCH_ID),
    ])
    now = datetime.now(timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=30))
        .sign(key, hashes.SHA256())
    )
    return pkcs12.serialize_key_and_certificates(
        b"apiclient",
        key,
        cert,
        None,
        serialization.BestAvailableEncryption(MCH_ID.encode("utf-8")),
    )


@pytest.fixture()
def cert_account(p12_data: bytes) -> Account:
    return Account(APP_ID, MCH_ID, API_KEY, cert_data=p12_data)


@pytest.fixture()
def cert_client(cert_account: Account, gateway: FakeGateway) -> WxPayClient:
    return WxPayClient(cert_account, transport_factory=gateway.transport_factory)

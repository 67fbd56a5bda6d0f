from __future__ import annotations

import logging
import ssl
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import httpx
from pydantic import ValidationError

from wxpay import config
from wxpay.account import Account
from wxpay.constants import (
    API_HOST,
    AUTH_CODE_TO_OPENID_MCH_URL,
    AUTH_CODE_TO_OPENID_PATH,
    BODY_TYPE,
    CLOSE_ORDER_PATH,
    DOWNLOAD_BILL_PATH,
    DOWNLOAD_FUND_FLOW_PATH,
    FAIL,
    MCH_TO_CASH_URL,
    MICRO_PAY_PATH,
    ORDER_QUERY_PATH,
    REFUND_PATH,
    REFUND_QUERY_PATH,
    REPORT_PATH,
    RETURN_CODE_FIELD,
    REVERSE_PATH,
    SANDBOX_API_HOST,
    SHORT_URL_PATH,
    SIGN_FIELD,
    SUCCESS,
    UNIFIED_ORDER_PATH,
    RequestKind,
    SignType,
    Verification,
)
from wxpay.errors import ConfigurationError, MalformedResponse, TransportError, TrustFailure
from wxpay.schemas import OAuthAccessTokenResponse
from wxpay.signing import sign, verify
from wxpay.types import Params
from wxpay.xmlcodec import map_to_xml, xml_to_map

logger = logging.getLogger(__name__)


def nonce_str() -> str:
    return uuid.uuid4().hex


def _http_error_details(exc: httpx.HTTPError) -> dict[str, Any]:
    # str(exc) embeds the request URL, query string included; never surface it.
    if isinstance(exc, httpx.HTTPStatusError):
        return {"status_code": exc.response.status_code}
    return {"error": type(exc).__name__}


def _default_sign_type() -> SignType:
    return SignType(config.settings.sign_type)


def _default_connect_timeout_ms() -> int:
    return config.settings.http_connect_timeout_ms


def _default_read_timeout_ms() -> int:
    return config.settings.http_read_timeout_ms


@dataclass
class WxPayClient:
    """Synchronous client for the WeChat Pay merchant XML API.

    Requests are filled with the merchant identity, a nonce and a signature
    before being posted as XML; ``SUCCESS`` responses are signature-checked
    before they are handed back.

    ``transport_factory`` builds the ``httpx`` transport for each call. It
    receives the TLS verify setting, which is the merchant's client
    certificate context on mutual TLS endpoints, and must honour it.
    """

    account: Account
    sign_type: SignType = field(default_factory=_default_sign_type)
    http_connect_timeout_ms: int = field(default_factory=_default_connect_timeout_ms)
    http_read_timeout_ms: int = field(default_factory=_default_read_timeout_ms)
    transport_factory: Callable[[ssl.SSLContext | bool], httpx.BaseTransport] | None = None

    def __post_init__(self) -> None:
        self.sign_type = SignType(self.sign_type)

    # --- Configuration ---

    def set_http_connect_timeout_ms(self, ms: int) -> None:
        self.http_connect_timeout_ms = ms

    def set_http_read_timeout_ms(self, ms: int) -> None:
        self.http_read_timeout_ms = ms

    def set_sign_type(self, sign_type: SignType | str) -> None:
        self.sign_type = SignType(sign_type)

    def set_account(self, account: Account) -> None:
        self.account = account

    # --- Signing ---

    def sign(self, params: Params) -> str:
        return sign(params, self.account.api_key, self.sign_type)

    def valid_sign(self, params: Params) -> bool:
        return verify(params, self.account.api_key, self.sign_type)

    def generate_signed_xml(self, params: Params) -> str:
        """Sign *params* in place and return them serialized as XML."""
        params[SIGN_FIELD] = self.sign(params)
        return map_to_xml(params)

    def fill_request_data(self, params: Params, kind: RequestKind = RequestKind.STANDARD) -> Params:
        """Add identity fields, ``nonce_str`` and ``sign`` to *params*.

        The signature is computed last so it covers everything injected here.
        """
        kind = RequestKind(kind)
        if kind is RequestKind.MCH_TO_CASH:
            params["mch_appid"] = self.account.app_id
            params["mchid"] = self.account.mch_id
        else:
            params["appid"] = self.account.app_id
            params["mch_id"] = self.account.mch_id
            params["sign_type"] = self.sign_type.value
        params["nonce_str"] = nonce_str()
        params[SIGN_FIELD] = self.sign(params)
        return params

    # --- Transport ---

    def _timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            self.http_read_timeout_ms / 1000,
            connect=self.http_connect_timeout_ms / 1000,
        )

    def _client(self, *, ssl_verify: ssl.SSLContext | bool = True) -> httpx.Client:
        if self.transport_factory is not None:
            return httpx.Client(timeout=self._timeout(), transport=self.transport_factory(ssl_verify))
        return httpx.Client(timeout=self._timeout(), verify=ssl_verify)

    def _post(self, url: str, params: Params, *, ssl_verify: ssl.SSLContext | bool = True) -> str:
        body = map_to_xml(params).encode("utf-8")
        try:
            with self._client(ssl_verify=ssl_verify) as c:
                r = c.post(url, content=body, headers={"Content-Type": BODY_TYPE})
                r.raise_for_status()
                return r.text
        except httpx.HTTPError as exc:
            details = {"url": url, **_http_error_details(exc)}
            logger.warning("POST %s failed: %s", url, details)
            raise TransportError(f"POST {url} failed", details) from exc

    def _post_without_cert(self, url: str, params: Params) -> str:
        p = self.fill_request_data(params)
        logger.debug("POST %s", url)
        return self._post(url, p)

    def _post_with_cert(self, url: str, params: Params, kind: RequestKind = RequestKind.STANDARD) -> str:
        if not self.account.has_cert:
            raise ConfigurationError("certificate data is empty", {"url": url, "mch_id": self.account.mch_id})
        ctx = self.account.ssl_context()
        p = self.fill_request_data(params, kind)
        logger.debug("POST %s with client certificate", url)
        return self._post(url, p, ssl_verify=ctx)

    def _get_json(self, url: str, query: dict[str, str]) -> dict[str, Any]:
        # Query carries the app secret; only the bare URL is logged or kept.
        logger.debug("GET %s", url)
        try:
            with self._client() as c:
                r = c.get(url, params=query)
                r.raise_for_status()
                data = r.json()
        except httpx.HTTPError as exc:
            details = {"url": url, **_http_error_details(exc)}
            logger.warning("GET %s failed: %s", url, details)
            raise TransportError(f"GET {url} failed", details) from exc
        except ValueError as exc:
            raise MalformedResponse("response is not valid JSON", {"url": url}) from exc
        if not isinstance(data, dict):
            raise MalformedResponse("response is not a JSON object", {"url": url})
        return data

    # --- Responses ---

    def process_response_xml(
        self,
        xml: str,
        verification: Verification | str = Verification.VERIFY_SIGNATURE,
    ) -> Params:
        """Decode a response and decide whether it can be trusted.

        ``FAIL`` responses are returned unchecked because the gateway does not
        always sign them. ``SUCCESS`` responses must carry a valid signature
        unless *verification* is ``TRUST_WITHOUT_VERIFICATION``.
        """
        verification = Verification(verification)
        params = xml_to_map(xml)
        if RETURN_CODE_FIELD not in params:
            raise MalformedResponse("no return_code in XML")
        return_code = params[RETURN_CODE_FIELD]
        if return_code == FAIL:
            return params
        if return_code == SUCCESS:
            if verification is Verification.TRUST_WITHOUT_VERIFICATION:
                return params
            if self.valid_sign(params):
                return params
            logger.warning("Invalid sign in response (return_code=SUCCESS, mch_id=%s)", self.account.mch_id)
            raise TrustFailure("invalid sign value in XML")
        raise MalformedResponse("return_code value is invalid in XML", {"return_code": return_code})

    @staticmethod
    def _process_download(raw: str) -> Params:
        # Successful downloads are plain CSV text; errors come back as XML.
        # The gateway only distinguishes them by the leading "<".
        if raw.startswith("<"):
            return xml_to_map(raw)
        return {RETURN_CODE_FIELD: SUCCESS, "return_msg": "ok", "data": raw}

    # --- Endpoints ---

    def _url(self, path: str) -> str:
        host = SANDBOX_API_HOST if self.account.sandbox else API_HOST
        return host + path

    def unified_order(self, params: Params) -> Params:
        xml = self._post_without_cert(self._url(UNIFIED_ORDER_PATH), params)
        return self.process_response_xml(xml)

    def micro_pay(self, params: Params) -> Params:
        """Pay by scanning the customer's payment code."""
        xml = self._post_without_cert(self._url(MICRO_PAY_PATH), params)
        return self.process_response_xml(xml)

    def refund(self, params: Params) -> Params:
        xml = self._post_with_cert(self._url(REFUND_PATH), params)
        return self.process_response_xml(xml)

    def order_query(self, params: Params) -> Params:
        xml = self._post_without_cert(self._url(ORDER_QUERY_PATH), params)
        return self.process_response_xml(xml)

    def refund_query(self, params: Params) -> Params:
        xml = self._post_without_cert(self._url(REFUND_QUERY_PATH), params)
        return self.process_response_xml(xml)

    def reverse(self, params: Params) -> Params:
        xml = self._post_with_cert(self._url(REVERSE_PATH), params)
        return self.process_response_xml(xml)

    def close_order(self, params: Params) -> Params:
        xml = self._post_without_cert(self._url(CLOSE_ORDER_PATH), params)
        return self.process_response_xml(xml)

    def download_bill(self, params: Params) -> Params:
        """Download the daily statement. Consider raising the read timeout first."""
        raw = self._post_without_cert(self._url(DOWNLOAD_BILL_PATH), params)
        return self._process_download(raw)

    def download_fund_flow(self, params: Params) -> Params:
        raw = self._post_with_cert(self._url(DOWNLOAD_FUND_FLOW_PATH), params)
        return self._process_download(raw)

    def report(self, params: Params) -> Params:
        xml = self._post_without_cert(self._url(REPORT_PATH), params)
        return self.process_response_xml(xml)

    def short_url(self, params: Params) -> Params:
        xml = self._post_without_cert(self._url(SHORT_URL_PATH), params)
        return self.process_response_xml(xml)

    def auth_code_to_openid(self, params: Params) -> Params:
        xml = self._post_without_cert(self._url(AUTH_CODE_TO_OPENID_PATH), params)
        return self.process_response_xml(xml)

    def mch_to_cash(self, params: Params) -> Params:
        """Pay out to a user's wallet. The gateway does not sign these responses."""
        xml = self._post_with_cert(MCH_TO_CASH_URL, params, RequestKind.MCH_TO_CASH)
        return self.process_response_xml(xml, Verification.TRUST_WITHOUT_VERIFICATION)

    def auth_code_to_openid_mch(self, *, app_secret: str, auth_code: str) -> str:
        """Exchange an OAuth ``code`` for the user's openid (JSON API, not signed)."""
        query = {
            "appid": self.account.app_id,
            "secret": app_secret,
            "code": auth_code,
            "grant_type": "authorization_code",
        }
        data = self._get_json(AUTH_CODE_TO_OPENID_MCH_URL, query)
        try:
            resp = OAuthAccessTokenResponse.model_validate(data)
        except ValidationError as exc:
            raise ConfigurationError("invalid access_token response", {"error": str(exc)}) from exc
        if not resp.openid:
            raise ConfigurationError(
                "no openid in access_token response",
                {"errcode": resp.errcode, "errmsg": resp.errmsg},
            )
        return resp.openid

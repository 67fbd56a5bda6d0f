from __future__ import annotations

import os


def _get_int(name: str, default: int) -> int:
    val = os.getenv(name)
    if val is None or val == "":
        return default
    return int(val)


def _get_bool(name: str, default: bool) -> bool:
    val = os.getenv(name)
    if val is None or val == "":
        return default
    return val.strip().lower() in {"1", "true", "yes", "y", "on"}


class Settings:
    # HTTP timeouts (milliseconds). Bill downloads usually need a longer read timeout.
    http_connect_timeout_ms: int = _get_int("WXPAY_HTTP_CONNECT_TIMEOUT_MS", 2000)
    http_read_timeout_ms: int = _get_int("WXPAY_HTTP_READ_TIMEOUT_MS", 1000)

    sign_type: str = os.getenv("WXPAY_SIGN_TYPE") or "MD5"

    # Merchant account, read by Account.from_env()
    app_id: str = os.getenv("WXPAY_APP_ID", "")
    mch_id: str = os.getenv("WXPAY_MCH_ID", "")
    api_key: str = os.getenv("WXPAY_API_KEY", "")
    cert_path: str = os.getenv("WXPAY_CERT_PATH", "")
    sandbox: bool = _get_bool("WXPAY_SANDBOX", False)


settings = Settings()

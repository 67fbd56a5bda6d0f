from __future__ import annotations

from enum import Enum

BODY_TYPE = "application/xml; charset=utf-8"

SIGN_FIELD = "sign"
SIGN_KEY_FIELD = "key"
RETURN_CODE_FIELD = "return_code"

SUCCESS = "SUCCESS"
FAIL = "FAIL"


class SignType(str, Enum):
    MD5 = "MD5"
    HMAC_SHA256 = "HMAC-SHA256"


class RequestKind(str, Enum):
    """Which identity schema a request carries."""

    STANDARD = "standard"
    # Merchant payouts to a user's wallet use mch_appid/mchid and no sign_type.
    MCH_TO_CASH = "mch_to_cash"


class Verification(str, Enum):
    VERIFY_SIGNATURE = "verify_signature"
    TRUST_WITHOUT_VERIFICATION = "trust_without_verification"


API_HOST = "https://api.mch.weixin.qq.com"
SANDBOX_API_HOST = API_HOST + "/sandboxnew"

MICRO_PAY_PATH = "/pay/micropay"
UNIFIED_ORDER_PATH = "/pay/unifiedorder"
ORDER_QUERY_PATH = "/pay/orderquery"
REVERSE_PATH = "/secapi/pay/reverse"
CLOSE_ORDER_PATH = "/pay/closeorder"
REFUND_PATH = "/secapi/pay/refund"
REFUND_QUERY_PATH = "/pay/refundquery"
DOWNLOAD_BILL_PATH = "/pay/downloadbill"
DOWNLOAD_FUND_FLOW_PATH = "/pay/downloadfundflow"
REPORT_PATH = "/payitil/report"
SHORT_URL_PATH = "/tools/shorturl"
AUTH_CODE_TO_OPENID_PATH = "/tools/authcodetoopenid"

# No sandbox counterpart exists for payouts.
MCH_TO_CASH_URL = API_HOST + "/mmpaymkttransfers/promotion/transfers"

AUTH_CODE_TO_OPENID_MCH_URL = "https://api.weixin.qq.com/sns/oauth2/access_token"

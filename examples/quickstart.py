from __future__ import annotations

import logging

from wxpay import Account, WxPayClient


def main() -> int:
    logging.basicConfig(level=logging.DEBUG)

    # Reads WXPAY_APP_ID / WXPAY_MCH_ID / WXPAY_API_KEY (and optionally
    # WXPAY_CERT_PATH, WXPAY_SANDBOX) from the environment.
    account = Account.from_env()
    client = WxPayClient(account)

    order = client.unified_order({
        "body": "Quickstart order",
        "out_trade_no": "quickstart-0001",
        "total_fee": "1",
        "spbill_create_ip": "127.0.0.1",
        "notify_url": "https://example.com/wxpay/notify",
        "trade_type": "NATIVE",
    })
    print("Unified order:", order)

    status = client.order_query({"out_trade_no": "quickstart-0001"})
    print("Order status:", status.get("trade_state"))

    # Statements can be large; give the read plenty of time.
    client.set_http_read_timeout_ms(30_000)
    bill = client.download_bill({"bill_date": "20240101", "bill_type": "ALL"})
    print("Bill:", bill.get("return_code"), len(bill.get("data", "")))

    if account.has_cert:
        refund = client.refund({
            "out_trade_no": "quickstart-0001",
            "out_refund_no": "quickstart-refund-0001",
            "total_fee": "1",
            "refund_fee": "1",
        })
        print("Refund:", refund)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())

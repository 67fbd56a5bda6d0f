from __future__ import annotations

import pytest

from wxpay.errors import MalformedResponse
from wxpay.xmlcodec import map_to_xml, xml_to_map


def test_map_to_xml_layout():
    assert map_to_xml({"appid": "wx1", "mch_id": "100"}) == "<xml><appid>wx1</appid><mch_id>100</mch_id></xml>"


def test_special_characters_are_escaped():
    xml = map_to_xml({"body": "a<b & c>d"})
    assert "a&lt;b &amp; c&gt;d" in xml
    assert xml_to_map(xml) == {"body": "a<b & c>d"}


def test_cdata_is_decoded():
    xml = "<xml><return_code><![CDATA[SUCCESS]]></return_code><return_msg><![CDATA[OK]]></return_msg></xml>"
    assert xml_to_map(xml) == {"return_code": "SUCCESS", "return_msg": "OK"}


def test_empty_element_is_empty_string():
    assert xml_to_map("<xml><attach/><body></body></xml>") == {"attach": "", "body": ""}


def test_bytes_with_declaration():
    xml = '<?xml version="1.0" encoding="UTF-8"?><xml><body>充值</body></xml>'
    assert xml_to_map(xml) == {"body": "充值"}
    assert xml_to_map(xml.encode("utf-8")) == {"body": "充值"}


def test_comments_are_ignored():
    assert xml_to_map("<xml><!-- note --><a>1</a></xml>") == {"a": "1"}


def test_unicode_round_trip():
    params = {"body": "腾讯充值中心-QQ会员充值", "attach": "深圳分店"}
    assert xml_to_map(map_to_xml(params)) == params


@pytest.mark.parametrize("raw", ["", "not xml", "<xml><a>1</xml>"])
def test_malformed_xml_raises(raw):
    with pytest.raises(MalformedResponse):
        xml_to_map(raw)


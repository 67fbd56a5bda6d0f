"""Flat ``dict[str, str]`` <-> ``<xml>`` document codec used on the wire."""

from __future__ import annotations

from collections.abc import Mapping

from lxml import etree

from wxpay.errors import MalformedResponse

ROOT_TAG = "xml"


def _parser() -> etree.XMLParser:
    # One parser per call: lxml parsers must not be shared between threads.
    return etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)


def map_to_xml(params: Mapping[str, str]) -> str:
    """Serialize *params* as ``<xml><k>v</k>...</xml>``; values are escaped by lxml."""
    root = etree.Element(ROOT_TAG)
    for k, v in params.items():
        etree.SubElement(root, k).text = v
    return etree.tostring(root, encoding="unicode")


def xml_to_map(xml: str | bytes) -> dict[str, str]:
    """Decode the root element's direct children into a flat mapping.

    CDATA sections and escaped text both decode to plain strings; an empty
    element decodes to ``""``.
    """
    if isinstance(xml, str):
        xml = xml.encode("utf-8")
    try:
        root = etree.fromstring(xml, parser=_parser())
    except etree.XMLSyntaxError as exc:
        raise MalformedResponse("response is not well-formed XML", {"error": str(exc)}) from exc
    if root is None:
        raise MalformedResponse("response is empty")
    return {child.tag: child.text or "" for child in root if isinstance(child.tag, str)}

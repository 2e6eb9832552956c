from __future__ import annotations

import html
import re
import xml.etree.ElementTree as ET

from bs4 import BeautifulSoup
from pydantic import BaseModel, Field
from typing_extensions import Annotated

from .cache import DocumentKind
from .errors import ValidatorProtocolError
from .validator_client import RawResponse

STATUS_HEADER = "x-w3c-validator-status"
CSS_ERROR_SELECTOR = "div#errors > div > ul > li"

_WHITESPACE = re.compile(r"\s+")


class Verdict(BaseModel):
    valid: Annotated[bool, Field(description="Whether the validator accepted the document")]
    messages: Annotated[
        list[str],
        Field(default_factory=list, description="Diagnostics in validator order"),
    ]

    def message(self) -> str:
        return "\n".join(self.messages)


def interpret_markup(response: RawResponse) -> Verdict:
    status = response.header(STATUS_HEADER)
    if status is None:
        raise ValidatorProtocolError(
            f"an {STATUS_HEADER!r} header",
            f"headers {sorted(response.headers)}",
        )
    if status == "Valid":
        return Verdict(valid=True, messages=[])

    try:
        root = ET.fromstring(response.body)
    except ET.ParseError as e:
        raise ValidatorProtocolError("an XML validation report", f"unparsable body ({e})") from e

    messages_node = root.find("messages")
    if messages_node is None:
        raise ValidatorProtocolError(
            "a <messages> element in the XML report",
            f"root <{root.tag}> without one",
        )

    messages = [
        f"Invalid markup: line {msg.get('line', '?')}: {html.unescape(''.join(msg.itertext()))}"
        for msg in messages_node.findall("msg")
    ]
    return Verdict(valid=False, messages=messages)


def interpret_css(response: RawResponse) -> Verdict:
    soup = BeautifulSoup(response.body, "html.parser")
    messages = []
    for item in soup.select(CSS_ERROR_SELECTOR):
        text = _WHITESPACE.sub(" ", item.get_text(separator=" ")).strip()
        messages.append(text)
    return Verdict(valid=not messages, messages=messages)


def interpret(kind: DocumentKind, response: RawResponse) -> Verdict:
    if kind is DocumentKind.MARKUP:
        return interpret_markup(response)
    return interpret_css(response)

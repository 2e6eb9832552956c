from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote_plus, urlencode

from .config import DEFAULT_BOUNDARY

CRLF = "\r\n"


@dataclass(frozen=True)
class MarkupRequest:
    fragment: str
    output: str = "xml"

    def params(self) -> dict[str, str]:
        return {"fragment": self.fragment, "output": self.output}

    def headers(self) -> dict[str, str]:
        return {"Content-Type": "application/x-www-form-urlencoded"}

    def body(self) -> bytes:
        return urlencode(self.params(), quote_via=quote_plus).encode("utf-8")


@dataclass(frozen=True)
class CssRequest:
    css: str
    warning: str = "1"
    profile: str = "css2"
    usermedium: str = "all"
    filename: str = "file.css"
    mime_type: str = "text/css"
    boundary: str = DEFAULT_BOUNDARY

    def params(self) -> dict[str, str]:
        return {
            "warning": self.warning,
            "profile": self.profile,
            "usermedium": self.usermedium,
        }

    def headers(self) -> dict[str, str]:
        return {"Content-Type": f"multipart/form-data; boundary={self.boundary}"}

    def parts(self) -> list[str]:
        parts = [file_part("file", self.filename, self.mime_type, self.css)]
        parts.extend(text_part(name, value) for name, value in self.params().items())
        return parts

    def body(self) -> bytes:
        delimiter = f"--{self.boundary}{CRLF}"
        payload = "".join(delimiter + part for part in self.parts())
        payload += f"--{self.boundary}--{CRLF}"
        return payload.encode("utf-8")


def text_part(name: str, value: str) -> str:
    return (
        f'Content-Disposition: form-data; name="{quote_plus(name)}"{CRLF}{CRLF}'
        f"{value}{CRLF}"
    )


def file_part(name: str, filename: str, mime_type: str, content: str) -> str:
    return (
        f'Content-Disposition: form-data; name="{quote_plus(name)}"; filename="{filename}"{CRLF}'
        f"Content-Transfer-Encoding: binary{CRLF}"
        f"Content-Type: {mime_type}{CRLF}{CRLF}"
        f"{content}{CRLF}"
    )

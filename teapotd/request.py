"""Incoming request buffering and request-line parsing."""

from __future__ import annotations

import enum
import logging
import os
import re
from dataclasses import dataclass, field

BUFFER_SIZE = 2048
MAX_VERSION_LENGTH = 20
CRLF = "\r\n"
HEADER_TERMINATOR = b"\r\n\r\n"

_log = logging.getLogger(__name__)
_LINE_BREAK = re.compile(r"[\r\n]")


class Method(enum.Enum):
    """Request methods the server understands."""

    INVALID = 0
    GET = 1
    BREW = 2


_METHODS = {"GET": Method.GET, "BREW": Method.BREW}


@dataclass
class Request:
    """A parsed request line."""

    method: Method = Method.INVALID
    path: str = ""
    http_version: str = ""

    def full_path(self, root: str | os.PathLike) -> str:
        """Return the web root joined verbatim with the requested path."""
        return os.fspath(root) + self.path


@dataclass
class PendingMessage:
    """Bytes received so far on one connection."""

    fd: int
    buffer: bytearray = field(default_factory=bytearray)

    def feed(self, data: bytes) -> int:
        """Append data up to the buffer limit; return how many bytes were kept."""
        room = BUFFER_SIZE - len(self.buffer)
        accepted = bytes(data[: max(room, 0)])
        self.buffer.extend(accepted)
        return len(accepted)

    def ready(self) -> bool:
        """True once the request headers are complete (a blank line was seen)."""
        return HEADER_TERMINATOR in self.buffer


def parse_request(raw: str | bytes) -> Request:
    """Parse the request line of a raw request; any body is ignored."""
    text = raw.decode("latin-1") if isinstance(raw, (bytes, bytearray)) else raw
    text = text.split("\0", 1)[0][:BUFFER_SIZE]

    stripped = text.lstrip(CRLF)
    if not stripped:
        return Request()
    line = _LINE_BREAK.split(stripped, 1)[0]
    tokens = [token for token in line.split(" ") if token]

    method_name = tokens[0] if tokens else None
    path = tokens[1] if len(tokens) > 1 else ""
    version = tokens[2][:MAX_VERSION_LENGTH] if len(tokens) > 2 else ""
    _log.debug("req: %s, path: %s, ver: %s", method_name, path, version)

    method = _METHODS.get(method_name, Method.INVALID) if method_name else Method.INVALID
    return Request(method=method, path=path, http_version=version)
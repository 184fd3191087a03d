"""Building and sending responses."""

from __future__ import annotations

import enum
import os
import socket
import stat
from datetime import datetime, timezone

from teapotd.request import CRLF, Method, Request

HTTP_VERSION = "HTTP/1.0"
HTCPCP_VERSION = "HTCPCP/1.0"
DEFAULT_MIME_TYPE = "application/octet-stream"

_MIME_TYPES = {
    ".html": "text/html",
    ".jpg": "image/jpeg",
    ".css": "text/css",
    ".js": "text/javascript",
}

_DAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


class Status(enum.IntEnum):
    """Response status codes the server produces."""

    OK = 200
    BAD_REQUEST = 400
    FORBIDDEN = 403
    NOT_FOUND = 404
    TEAPOT = 418

    def reason(self) -> str:
        """The reason phrase for this status."""
        return _REASONS[self]


_REASONS = {
    Status.OK: "OK",
    Status.BAD_REQUEST: "Bad Request",
    Status.FORBIDDEN: "Forbidden",
    Status.NOT_FOUND: "Not Found",
    Status.TEAPOT: "I'm a teapot",
}


def status_code(request: Request, full_path: str | os.PathLike) -> Status:
    """Decide the response status for a request and the file it maps to."""
    if request.method is Method.INVALID:
        return Status.BAD_REQUEST
    if request.method is Method.BREW:
        return Status.TEAPOT
    if "/../" in request.path:
        return Status.NOT_FOUND
    if not request.path.startswith("/"):
        return Status.BAD_REQUEST
    try:
        info = os.stat(full_path)
    except OSError:
        return Status.NOT_FOUND
    if not stat.S_ISREG(info.st_mode):
        return Status.NOT_FOUND
    if not os.access(full_path, os.R_OK):
        return Status.FORBIDDEN
    return Status.OK


def status_line(request: Request, status: Status) -> bytes:
    """The status line for a response, protocol chosen by the request method."""
    protocol = HTCPCP_VERSION if request.method is Method.BREW else HTTP_VERSION
    return f"{protocol} {int(status):03d} {status.reason()}{CRLF}".encode("ascii")


def mime_type(path: str) -> str:
    """Content type for a path, judged by the text after its last dot."""
    dot = path.rfind(".")
    if dot < 0:
        return DEFAULT_MIME_TYPE
    return _MIME_TYPES.get(path[dot:], DEFAULT_MIME_TYPE)


def content_type_header(request: Request) -> bytes:
    """The Content-type header line for the requested path."""
    return f"Content-type: {mime_type(request.path)}{CRLF}".encode("ascii")


def date_header(now: datetime | None = None) -> bytes:
    """The Date header line for the given moment (naive times are taken as UTC)."""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    text = (
        f"Date: {_DAYS[now.weekday()]}, {now.day:02d} {_MONTHS[now.month - 1]} "
        f"{now.year:04d} {now.hour:02d}:{now.minute:02d}:{now.second:02d} GMT{CRLF}"
    )
    return text.encode("ascii")


def http_headers(request: Request, now: datetime | None = None) -> bytes:
    """All headers for a successful response, ending with the blank line."""
    return content_type_header(request) + date_header(now) + CRLF.encode("ascii")


def send_contents(sock: socket.socket, path: str | os.PathLike) -> int:
    """Send the whole file at path over sock; return the number of bytes sent."""
    with open(path, "rb") as file:
        return sock.sendfile(file)
import os
import socket
import stat
from datetime import datetime, timedelta, timezone
from unittest import mock

import pytest

from teapotd.request import Method, Request, parse_request
from teapotd.response import (
    DEFAULT_MIME_TYPE,
    HTCPCP_VERSION,
    HTTP_VERSION,
    Status,
    content_type_header,
    date_header,
    http_headers,
    mime_type,
    send_contents,
    status_code,
    status_line,
)


@pytest.fixture
def web_root(tmp_path):
    (tmp_path / "index.html").write_text("<p>hi</p>")
    (tmp_path / "sub").mkdir()
    return tmp_path


def _get(path):
    return Request(Method.GET, path, "HTTP/1.0")


def test_reasons():
    assert Status.OK.reason() == "OK"
    assert Status.BAD_REQUEST.reason() == "Bad Request"
    assert Status.FORBIDDEN.reason() == "Forbidden"
    assert Status.NOT_FOUND.reason() == "Not Found"
    assert Status.TEAPOT.reason() == "I'm a teapot"


def test_status_ok_for_existing_file(web_root):
    req = _get("/index.html")
    assert status_code(req, req.full_path(web_root)) is Status.OK


def test_status_invalid_method_is_bad_request(web_root):
    req = parse_request("POST /index.html HTTP/1.0\r\n\r\n")
    assert status_code(req, req.full_path(web_root)) is Status.BAD_REQUEST


def test_status_brew_is_teapot(web_root):
    req = Request(Method.BREW, "/index.html", "HTCPCP/1.0")
    assert status_code(req, req.full_path(web_root)) is Status.TEAPOT


def test_status_parent_escape_is_not_found(web_root):
    req = _get("/sub/../index.html")
    assert status_code(req, req.full_path(web_root)) is Status.NOT_FOUND


def test_status_relative_path_is_bad_request(web_root):
    req = _get("index.html")
    assert status_code(req, str(web_root) + "/index.html") is Status.BAD_REQUEST


def test_status_missing_file_is_not_found(web_root):
    req = _get("/missing.html")
    assert status_code(req, req.full_path(web_root)) is Status.NOT_FOUND


def test_status_directory_is_not_found(web_root):
    req = _get("/sub")
    assert status_code(req, req.full_path(web_root)) is Status.NOT_FOUND


def test_status_unreadable_is_forbidden(web_root):
    req = _get("/index.html")
    with mock.patch("teapotd.response.os.access", return_value=False):
        assert status_code(req, req.full_path(web_root)) is Status.FORBIDDEN


def test_status_line_http():
    assert status_line(_get("/"), Status.OK) == b"HTTP/1.0 200 OK\r\n"


def test_status_line_htcpcp_for_brew():
    req = Request(Method.BREW, "/", "")
    assert status_line(req, Status.TEAPOT) == b"HTCPCP/1.0 418 I'm a teapot\r\n"


@pytest.mark.parametrize("status", list(Status))
def test_status_line_structure(status):
    line = status_line(_get("/x"), status).decode("ascii")
    assert line.endswith("\r\n")
    protocol, code, reason = line[:-2].split(" ", 2)
    assert protocol == HTTP_VERSION
    assert int(code) == status
    assert reason == status.reason()


def test_status_line_brew_uses_htcpcp_even_for_other_status():
    req = Request(Method.BREW, "/", "")
    assert status_line(req, Status.NOT_FOUND).startswith(HTCPCP_VERSION.encode())


@pytest.mark.parametrize(
    "path, expected",
    [
        ("/index.html", "text/html"),
        ("/img/cat.jpg", "image/jpeg"),
        ("/style.css", "text/css"),
        ("/app.js", "text/javascript"),
        ("/archive.tar.gz", DEFAULT_MIME_TYPE),
        ("/noextension", DEFAULT_MIME_TYPE),
        ("/dir.html/file", DEFAULT_MIME_TYPE),
        ("/page.HTML", DEFAULT_MIME_TYPE),
    ],
)
def test_mime_type(path, expected):
    assert mime_type(path) == expected


def test_content_type_header():
    assert content_type_header(_get("/a.css")) == b"Content-type: text/css\r\n"
    assert content_type_header(_get("/a")) == (
        b"Content-type: application/octet-stream\r\n"
    )


def test_date_header_fixed_moment():
    moment = datetime(2021, 5, 20, 12, 34, 56, tzinfo=timezone.utc)
    assert date_header(moment) == b"Date: Thu, 20 May 2021 12:34:56 GMT\r\n"


def test_date_header_converts_to_utc():
    moment = datetime(2021, 5, 20, 12, 34, 56, tzinfo=timezone.utc)
    shifted = moment.astimezone(timezone(timedelta(hours=5)))
    assert date_header(shifted) == date_header(moment)
    assert date_header(moment.replace(tzinfo=None)) == date_header(moment)


def test_date_header_default_is_now():
    header = date_header()
    assert header.startswith(b"Date: ")
    assert header.endswith(b" GMT\r\n")


def test_http_headers_combines_lines():
    moment = datetime(2021, 5, 20, 12, 34, 56, tzinfo=timezone.utc)
    req = _get("/index.html")
    headers = http_headers(req, moment)
    assert headers == content_type_header(req) + date_header(moment) + b"\r\n"
    assert headers.endswith(b"\r\n\r\n")


def test_send_contents_transfers_file(tmp_path):
    payload = bytes(range(256)) * 40
    target = tmp_path / "blob.jpg"
    target.write_bytes(payload)
    left, right = socket.socketpair()
    with left, right:
        sent = send_contents(left, target)
        left.shutdown(socket.SHUT_WR)
        chunks = []
        while chunk := right.recv(65536):
            chunks.append(chunk)
    assert sent == len(payload)
    assert b"".join(chunks) == payload


def test_send_contents_missing_file_raises(tmp_path):
    left, right = socket.socketpair()
    with left, right:
        with pytest.raises(FileNotFoundError):
            send_contents(left, tmp_path / "nope")
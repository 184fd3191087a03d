"""A small multiplexed HTTP/1.0 (and HTCPCP) file server."""

from __future__ import annotations

import errno
import logging
import os
import selectors
import socket
import stat
import sys
from typing import Sequence

from teapotd.request import BUFFER_SIZE, PendingMessage, parse_request
from teapotd.response import (
    Status,
    http_headers,
    send_contents,
    status_code,
    status_line,
)

BACKLOG = 128

USAGE = (
    "Usage:\n\t./server <protocol> <port> <path>\n\n"
    "protocol: number, 4 (for IPv4) or 6 (for IPv6)\n"
    "port: port number\n"
    "server path: string path to root web directory\n"
)

_log = logging.getLogger(__name__)


def address_family(protocol: str) -> socket.AddressFamily:
    """Map "4" or "6" to the matching address family."""
    if protocol == "4":
        return socket.AF_INET
    if protocol == "6":
        return socket.AF_INET6
    raise ValueError(f"unrecognised protocol ({protocol})")


def _bind_listener(family: int, port: int | str) -> socket.socket:
    """Create a non-blocking socket bound to the first usable passive address."""
    candidates = socket.getaddrinfo(
        None, str(port), family, socket.SOCK_STREAM, 0, socket.AI_PASSIVE
    )
    for af, socktype, proto, _canonname, address in candidates:
        try:
            sock = socket.socket(af, socktype, proto)
        except OSError as exc:
            _log.warning("socket: %s", exc)
            continue
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind(address)
        except OSError as exc:
            _log.warning("bind: %s", exc)
            sock.close()
            continue
        sock.setblocking(False)
        return sock
    raise OSError("unable to create socket or bind address")


class Server:
    """Serves regular files under a web root, one request per connection."""

    def __init__(self, family: int, port: int | str, root: str | os.PathLike) -> None:
        info = os.stat(root)
        if not stat.S_ISDIR(info.st_mode):
            raise NotADirectoryError(
                errno.ENOTDIR, "server path (web root) is not a directory", os.fspath(root)
            )
        self.root = os.fspath(root)
        self._closed = False
        self._listener = _bind_listener(family, port)
        try:
            self._listener.listen(BACKLOG)
        except OSError:
            self._listener.close()
            raise
        self._selector = selectors.DefaultSelector()
        self._selector.register(self._listener, selectors.EVENT_READ, None)
        _log.info("now listening")

    def address(self):
        """The address the listening socket is bound to."""
        return self._listener.getsockname()

    def serve_forever(self) -> None:
        """Handle events until the server is closed."""
        while not self._closed:
            self.handle_once(None)

    def handle_once(self, timeout: float | None = None) -> int:
        """Wait for one batch of events, handle it, and return how many there were."""
        events = self._selector.select(timeout)
        for key, _mask in events:
            if key.data is None:
                self._accept()
            else:
                self._read(key.fileobj, key.data)
        return len(events)

    def close(self) -> None:
        """Close every open connection and the listening socket."""
        if self._closed:
            return
        self._closed = True
        for key in list(self._selector.get_map().values()):
            self._selector.unregister(key.fileobj)
            if key.fileobj is not self._listener:
                key.fileobj.close()
        self._selector.close()
        self._listener.close()

    def __enter__(self) -> "Server":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def _accept(self) -> None:
        try:
            conn, _peer = self._listener.accept()
        except (BlockingIOError, InterruptedError):
            return
        except OSError as exc:
            _log.error("failed to accept new connection: %s", exc)
            return
        conn.setblocking(False)
        self._selector.register(
            conn, selectors.EVENT_READ, PendingMessage(fd=conn.fileno())
        )
        _log.info("Connected on socket: %d", conn.fileno())

    def _close_connection(self, conn: socket.socket) -> None:
        fd = conn.fileno()
        self._selector.unregister(conn)
        conn.close()
        _log.info("disconnecting socket: %d", fd)

    def _read(self, conn: socket.socket, message: PendingMessage) -> None:
        room = BUFFER_SIZE - len(message.buffer)
        if room <= 0:
            self._close_connection(conn)
            return
        try:
            data = conn.recv(room)
        except (BlockingIOError, InterruptedError):
            return
        except OSError as exc:
            _log.error("read: %s", exc)
            self._close_connection(conn)
            return
        if not data:
            self._close_connection(conn)
            return
        message.feed(data)
        if message.ready():
            self._respond(conn, message)
            self._close_connection(conn)

    def _respond(self, conn: socket.socket, message: PendingMessage) -> None:
        request = parse_request(bytes(message.buffer))
        file_path = request.full_path(self.root)
        status = status_code(request, file_path)
        conn.setblocking(True)
        try:
            conn.sendall(status_line(request, status))
            _log.info("response status code: %d", int(status))
            if status is Status.OK:
                conn.sendall(http_headers(request))
                send_contents(conn, file_path)
                _log.info("sent http headers and file contents")
        except OSError as exc:
            _log.error("write response: %s", exc)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the server from command-line arguments: protocol, port, web root."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 3:
        print(USAGE, file=sys.stderr)
        return 1
    protocol, port, root = args
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    try:
        family = address_family(protocol)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Initialising server with IPv{protocol} on port {port}\nwith root {root}")
    try:
        server = Server(family, port, root)
    except OSError as exc:
        print(f"server: {exc}", file=sys.stderr)
        return 1

    with server:
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
# teapotd

A small, single-threaded HTTP/1.0 server for static files. It multiplexes
client connections with non-blocking sockets and a selector. It answers one
request per connection and then closes that connection.

## What it serves

- `GET /some/file` returns the file under the web root with status
  `200 OK`, a `Content-type` header and a `Date` header (in GMT).
- The content type depends on the text after the last dot in the requested
  path: `.html` → `text/html`, `.jpg` → `image/jpeg`, `.css` → `text/css`,
  `.js` → `text/javascript`. Anything else is `application/octet-stream`.
- A path that contains `/../`, or names something that is missing or is not a
  regular file, gets `404 Not Found`. A file that cannot be read gets
  `403 Forbidden`.
- A path that does not start with `/`, or an unknown method, gets
  `400 Bad Request`.
- `BREW` requests get `HTCPCP/1.0 418 I'm a teapot`.

Error responses carry only the status line.

A request is handled once its headers end with a blank line (`\r\n\r\n`).
Only the request line is read. Other headers and any body are ignored. At
most 2048 bytes of a request are buffered. A connection that fills the buffer
without finishing its headers is closed without a response.

## Installing

```
pip install .
```

## Running

```
teapotd <protocol> <port> <path>
```

- `protocol`: `4` for IPv4 or `6` for IPv6
- `port`: the port number to listen on
- `path`: the web root directory, which must exist

For example:

```
teapotd 4 8080 ./www
```

The server logs connections and status codes to standard error and runs until
it is interrupted with Ctrl-C. If the arguments are wrong it prints a usage
message and exits with status 1. It does the same if the web root is not a
directory or the port cannot be bound.

## Using it from Python

```python
from teapotd.server import Server, address_family

with Server(address_family("4"), "8080", "./www") as server:
    print("listening on", server.address())
    server.serve_forever()
```

- `address_family("4")` and `address_family("6")` return the matching
  socket family. Any other value raises `ValueError`.
- `Server.handle_once(timeout)` waits for one batch of socket events, handles
  it, and returns how many events there were. This is useful when the server
  runs inside another loop or in tests.
- `Server.close()` closes all open connections and the listening socket. Using
  the server as a context manager calls it for you.

The request and response helpers can also be used on their own:

```python
from teapotd.request import parse_request
from teapotd.response import status_code, status_line, http_headers

request = parse_request("GET /index.html HTTP/1.0\r\n\r\n")
status = status_code(request, request.full_path("./www"))
print(status_line(request, status))   # b'HTTP/1.0 ... \r\n'
```

- `teapotd.request` provides `Method`, `Request`, `PendingMessage` (a
  per-connection buffer with `feed()` and `ready()`) and `parse_request()`.
- `teapotd.response` provides `Status`, `status_code()`, `status_line()`,
  `mime_type()`, `content_type_header()`, `date_header()`, `http_headers()`
  and `send_contents()`.

## What it does not do

There is no keep-alive, no directory index and no methods other than `GET`
and `BREW`. No header other than `Content-type` and `Date` is sent.

## Running the tests

```
pip install ".[test]"
pytest
```
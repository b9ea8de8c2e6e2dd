import base64
import os
import sys
import uuid
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qsl, urlsplit

from handler import handle


def to_event(method: str, raw_path: str, headers, body: bytes) -> dict:
    """Shape a raw HTTP request like a function-URL (payload v2.0) event."""
    parts = urlsplit(raw_path)
    event = {
        "version": "2.0",
        "rawPath": parts.path or "/",
        "rawQueryString": parts.query,
        "headers": {key: value for key, value in headers},
        "requestContext": {
            "requestId": str(uuid.uuid4()),
            "http": {"method": method, "path": parts.path or "/"},
        },
        "isBase64Encoded": False,
    }
    query = parse_qsl(parts.query, keep_blank_values=True)
    if query:
        event["queryStringParameters"] = dict(query)
    if body:
        event["body"] = base64.b64encode(body).decode("ascii")
        event["isBase64Encoded"] = True
    return event


class Handler(BaseHTTPRequestHandler):
    def _dispatch(self):
        content_length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(content_length) if content_length else b""
        event = to_event(self.command, self.path, self.headers.items(), body)

        try:
            response = handle(event, None)
        except Exception as e:  # pylint: disable=broad-except
            sys.stderr.write(f"DEBUG: Exception: {str(e)}\n")
            self.send_response(502)
            self.end_headers()
            self.wfile.write(str(e).encode("utf-8"))
            return

        payload = response["body"]
        data = base64.b64decode(payload) if response.get("isBase64Encoded") else payload.encode("utf-8")
        self.send_response(response["statusCode"])
        for key, value in response.get("headers", {}).items():
            if key.lower() not in {"transfer-encoding", "connection", "content-length"}:
                self.send_header(key, value)
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(data)

    do_GET = do_POST = do_PUT = do_PATCH = do_DELETE = do_HEAD = do_OPTIONS = _dispatch


if __name__ == "__main__":
    port = int(os.getenv("port", 5000))
    server = ThreadingHTTPServer(("0.0.0.0", port), Handler)
    sys.stderr.write(f"Starting threading server on port {port}\n")
    server.serve_forever()

# ui/server.py
import logging
import mimetypes
import os
import shutil
import threading
from functools import partial
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Optional
from urllib.parse import unquote

logger = logging.getLogger(__name__)

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000


class StaticFileHandler(BaseHTTPRequestHandler):
    """Read-only handler that serves files from a single directory."""

    def __init__(self, *args, directory: str, **kwargs):
        self._serve_directory = directory
        super().__init__(*args, **kwargs)

    def _resolve(self) -> Optional[str]:
        """Map the request path to a file, or send an error and return None."""
        # Remove query string and leading slash
        request_path = unquote(self.path.split('?')[0].split('#')[0]).lstrip('/')

        full_path = os.path.normpath(os.path.join(self._serve_directory, request_path))

        # Ensure the path is within serve_directory
        real_serve_dir = os.path.realpath(self._serve_directory)
        real_full_path = os.path.realpath(full_path)
        if os.path.commonpath([real_serve_dir, real_full_path]) != real_serve_dir:
            self.send_error(403, "Forbidden")
            return None

        if os.path.isdir(full_path):
            index_path = os.path.join(full_path, 'index.html')
            if not os.path.isfile(index_path):
                self.send_error(404, "Not Found")
                return None
            full_path = index_path

        if not os.path.isfile(full_path):
            self.send_error(404, "Not Found")
            return None

        return full_path

    def _send_file_headers(self, full_path: str) -> None:
        mime_type, _ = mimetypes.guess_type(full_path)
        if mime_type is None:
            mime_type = 'application/octet-stream'

        self.send_response(200)
        self.send_header('Content-Type', mime_type)
        self.send_header('Content-Length', str(os.path.getsize(full_path)))
        self.send_header('Cache-Control', 'no-cache')
        self.end_headers()

    def do_GET(self):
        full_path = self._resolve()
        if full_path is None:
            return
        try:
            f = open(full_path, 'rb')
        except OSError as e:
            self.send_error(500, f"Internal Server Error: {e}")
            return
        with f:
            self._send_file_headers(full_path)
            shutil.copyfileobj(f, self.wfile)

    def do_HEAD(self):
        full_path = self._resolve()
        if full_path is None:
            return
        try:
            self._send_file_headers(full_path)
        except OSError as e:
            self.send_error(500, f"Internal Server Error: {e}")

    def log_message(self, format, *args):
        logger.debug("%s - %s", self.address_string(), format % args)


def make_server(
    static_root: Path, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT
) -> ThreadingHTTPServer:
    handler = partial(StaticFileHandler, directory=str(static_root))
    return ThreadingHTTPServer((host, port), handler)


def start_static_server(
    static_root: Path, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT
) -> ThreadingHTTPServer:
    """Serve ``static_root`` on a daemon thread; port 0 picks a free port."""
    httpd = make_server(static_root, host, port)
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    logger.info("Serving %s at %s", static_root, server_url(httpd))
    return httpd


def serve_forever(
    static_root: Path, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT
) -> None:
    """Serve ``static_root`` until interrupted."""
    with make_server(static_root, host, port) as httpd:
        logger.info("Serving %s at %s", static_root, server_url(httpd))
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            logger.info("Server stopped")


def server_url(httpd: ThreadingHTTPServer) -> str:
    host, port = httpd.server_address[:2]
    # Server listens on all interfaces but browsers use localhost
    if host in ("0.0.0.0", ""):
        host = "localhost"
    return f"http://{host}:{port}"

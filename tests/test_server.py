from __future__ import annotations

import http.client
from pathlib import Path

import pytest

from ui.server import server_url, start_static_server


@pytest.fixture
def served(tmp_path: Path):
    root = tmp_path / "output"
    root.mkdir()
    (root / "report.pdf.html").write_text("<p>hello</p>", encoding="utf-8")
    (root / "sub").mkdir()
    (tmp_path / "secret.txt").write_text("secret", encoding="utf-8")

    httpd = start_static_server(root, host="127.0.0.1", port=0)
    try:
        yield httpd
    finally:
        httpd.shutdown()
        httpd.server_close()


def _request(httpd, method: str, path: str):
    host, port = httpd.server_address[:2]
    conn = http.client.HTTPConnection(host, port, timeout=5)
    try:
        conn.request(method, path)
        response = conn.getresponse()
        return response.status, dict(response.getheaders()), response.read()
    finally:
        conn.close()


def test_get_serves_file_with_headers(served):
    status, headers, body = _request(served, "GET", "/report.pdf.html?x=1")
    assert status == 200
    assert body == b"<p>hello</p>"
    assert headers["Content-Type"] == "text/html"
    assert headers["Content-Length"] == str(len(body))
    assert headers["Cache-Control"] == "no-cache"


def test_head_sends_no_body(served):
    status, headers, body = _request(served, "HEAD", "/report.pdf.html")
    assert status == 200
    assert body == b""
    assert headers["Content-Length"] == "12"


def test_missing_file_and_directory_without_index(served):
    assert _request(served, "GET", "/nope.html")[0] == 404
    assert _request(served, "GET", "/sub/")[0] == 404


def test_paths_outside_root_are_forbidden(served):
    assert _request(served, "GET", "/../secret.txt")[0] == 403


def test_write_methods_are_rejected(served):
    assert _request(served, "POST", "/report.pdf.html")[0] == 501


def test_server_url_uses_bound_port(served):
    assert server_url(served) == f"http://127.0.0.1:{served.server_address[1]}"

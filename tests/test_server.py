import http.client
import json
import threading
from http.server import ThreadingHTTPServer

import pytest

from repokeywords.server import make_handler, render_response


@pytest.fixture
def data_file(tmp_path):
    path = tmp_path / "file_data.json"
    path.write_text(json.dumps([{"b": [1, 2], "a": "x"}]), encoding="utf-8")
    return path


@pytest.fixture
def running_server(data_file):
    server = ThreadingHTTPServer(("127.0.0.1", 0), make_handler(str(data_file)))
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server.server_address[1]
    finally:
        server.shutdown()
        server.server_close()


def _request(port, method, headers=None):
    connection = http.client.HTTPConnection("127.0.0.1", port, timeout=5)
    try:
        connection.request(method, "/anything", headers=headers or {})
        response = connection.getresponse()
        return response.status, response, response.read()
    finally:
        connection.close()


def test_render_response_serves_compact_sorted_json(data_file):
    status, headers, body = render_response(str(data_file))
    assert status == 200
    assert headers["Content-Type"] == "application/json"
    assert headers["Content-Length"] == str(len(body))
    assert body == b'[{"a":"x","b":[1,2]}]'


def test_render_response_null_gives_message(tmp_path):
    path = tmp_path / "data.json"
    path.write_text("null\n", encoding="utf-8")
    status, _, body = render_response(str(path))
    assert status == 200
    assert body == b'{"Message":"wompedy womp"}'


def test_render_response_writes_integral_floats_as_integers(tmp_path):
    path = tmp_path / "data.json"
    path.write_text('{"n": 3.0, "f": 2.5}', encoding="utf-8")
    _, _, body = render_response(str(path))
    assert json.loads(body) == {"n": 3, "f": 2.5}
    assert b"3.0" not in body


def test_render_response_escapes_html(tmp_path):
    path = tmp_path / "data.json"
    path.write_text(json.dumps({"t": "<a&b>"}), encoding="utf-8")
    _, _, body = render_response(str(path))
    assert b"<" not in body and b"&" not in body
    assert json.loads(body) == {"t": "<a&b>"}


def test_render_response_missing_file(tmp_path):
    status, headers, body = render_response(str(tmp_path / "missing.json"))
    assert status == 500
    assert headers["Content-Type"] == "text/plain; charset=utf-8"
    assert body.startswith(b"Failed to read the local JSON file: ")
    assert body.endswith(b"\n")


def test_render_response_invalid_json(tmp_path):
    path = tmp_path / "data.json"
    path.write_text("{not json", encoding="utf-8")
    status, _, body = render_response(str(path))
    assert status == 500
    assert body.startswith(b"Failed to parse JSON: ")


def test_get_serves_data_with_cors(running_server):
    status, response, body = _request(
        running_server, "GET", {"Origin": "http://localhost"}
    )
    assert status == 200
    assert response.getheader("Access-Control-Allow-Origin") == "*"
    assert json.loads(body) == [{"a": "x", "b": [1, 2]}]


def test_head_has_no_body(running_server):
    status, response, body = _request(running_server, "HEAD")
    assert status == 200
    assert body == b""
    assert int(response.getheader("Content-Length")) > 0


def test_preflight_is_answered(running_server):
    status, response, body = _request(
        running_server,
        "OPTIONS",
        {
            "Origin": "http://localhost",
            "Access-Control-Request-Method": "post",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )
    assert status == 204
    assert body == b""
    assert response.getheader("Access-Control-Allow-Origin") == "*"
    assert response.getheader("Access-Control-Allow-Methods") == "POST"
    assert response.getheader("Access-Control-Allow-Headers") == "Content-Type"


def test_preflight_for_disallowed_method_has_no_origin(running_server):
    status, response, _ = _request(
        running_server,
        "OPTIONS",
        {"Origin": "http://localhost", "Access-Control-Request-Method": "DELETE"},
    )
    assert status == 204
    assert response.getheader("Access-Control-Allow-Origin") is None
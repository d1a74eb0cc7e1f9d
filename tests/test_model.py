import pytest

from resulthandler import Context, HTTPRequest, HTTPResponseWriter, HTTPWriteError


# -----------------------------------------------------------------------------
# REQUEST
# -----------------------------------------------------------------------------


def test_request_create():
	request = HTTPRequest.Create(
		"/items?page=2&q=a+b", method="post", headers={"if-modified-since": "x"}
	)
	assert request.method == "POST"
	assert request.path == "/items"
	assert request.param("page") == "2"
	assert request.param("q") == "a b"
	assert request.rawQuery == "page=2&q=a+b"
	assert request.param("missing", "default") == "default"
	assert request.param("page", processor=int) == 2
	assert request.header("If-Modified-Since") == "x"
	assert request.header("IF-MODIFIED-SINCE") == "x"


def test_context_writer_follows_request():
	ctx = Context(HTTPRequest.Create("/", method="HEAD"))
	assert ctx.writer.method == "HEAD"
	assert ctx.request.path == "/"


# -----------------------------------------------------------------------------
# WRITER
# -----------------------------------------------------------------------------


def test_first_status_wins():
	w = HTTPResponseWriter()
	w.writeHeader(201)
	w.writeHeader(500)
	assert w.status == 201


def test_write_commits_ok():
	w = HTTPResponseWriter()
	assert not w.committed
	assert w.write(b"abc") == 3
	assert w.committed
	assert w.status == 200
	assert w.written == 3


def test_headers_are_frozen_after_status():
	w = HTTPResponseWriter()
	w.setHeader("x-one", "1")
	w.writeHeader(200)
	w.setHeader("X-Two", "2")
	assert w.headers == {"X-One": "1"}


def test_set_header_none_removes():
	w = HTTPResponseWriter()
	w.setHeaders({"Content-Length": 10, "X-Test": "yes"})
	w.setHeader("content-length", None)
	assert w.headers == {"X-Test": "yes"}


def test_invalid_status():
	with pytest.raises(ValueError):
		HTTPResponseWriter().writeHeader(0)


def test_closed_writer_rejects_writes():
	w = HTTPResponseWriter()
	w.write(b"a")
	w.close()
	with pytest.raises(HTTPWriteError):
		w.write(b"b")
	assert bytes(w.body) == b"a"


@pytest.mark.parametrize("status", [101, 204, 304])
def test_body_not_allowed(status):
	w = HTTPResponseWriter().writeHeader(status)
	assert w.write(b"") == 0
	with pytest.raises(HTTPWriteError):
		w.write(b"body")


def test_head_writer_discards_body():
	w = HTTPResponseWriter(method="HEAD")
	assert w.write(b"hello") == 5
	assert w.written == 5
	assert bytes(w.body) == b""


def test_content_type_is_sniffed_on_first_write():
	w = HTTPResponseWriter()
	w.write(b"<!DOCTYPE html><p>x</p>")
	assert w.header("Content-Type") == "text/html; charset=utf-8"


def test_head_serialization():
	w = HTTPResponseWriter()
	w.setHeader("Content-Type", "text/plain")
	w.writeHeader(404)
	assert w.head() == b"HTTP/1.1 404 Not Found\r\nContent-Type: text/plain\r\n\r\n"


# EOF

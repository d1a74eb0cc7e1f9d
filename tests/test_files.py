import os

import pytest

from resulthandler import Context, HTTPRequest, ResultFile
from resulthandler.http.files import ByteRange, RangeError, httpdate, parseRange

CONTENT: bytes = b"hello world"


@pytest.fixture
def root(tmp_path):
	(tmp_path / "hello.txt").write_bytes(CONTENT)
	(tmp_path / "site").mkdir()
	(tmp_path / "site" / "index.html").write_bytes(b"<h1>Index</h1>")
	(tmp_path / "empty").mkdir()
	(tmp_path / "empty" / "a b.txt").write_bytes(b"a")
	return tmp_path


def serve(path, url: str = "/", method: str = "GET", **headers: str) -> Context:
	ctx = Context(
		HTTPRequest.Create(
			url,
			method=method,
			headers={k.replace("_", "-"): v for k, v in headers.items()},
		)
	)
	ResultFile(path).do(ctx)
	return ctx


def mtime(path) -> int:
	return int(os.stat(path).st_mtime)


# -----------------------------------------------------------------------------
# RANGE PARSING
# -----------------------------------------------------------------------------


def test_parse_range():
	assert parseRange("bytes=0-4", 11) == [ByteRange(0, 5)]
	assert parseRange("bytes=6-", 11) == [ByteRange(6, 5)]
	assert parseRange("bytes=-5", 11) == [ByteRange(6, 5)]
	assert parseRange("bytes=-50", 11) == [ByteRange(0, 11)]
	assert parseRange("bytes=0-100", 11) == [ByteRange(0, 11)]
	assert parseRange("bytes=0-0, 20-30, 2-3", 11) == [ByteRange(0, 1), ByteRange(2, 2)]
	assert parseRange("", 11) == []


@pytest.mark.parametrize(
	"value", ["items=0-1", "bytes=a-b", "bytes=5-1", "bytes=5", "bytes=20-", "bytes=-0"]
)
def test_parse_range_errors(value):
	with pytest.raises(RangeError):
		parseRange(value, 11)


# -----------------------------------------------------------------------------
# FILES
# -----------------------------------------------------------------------------


def test_missing_file_writes_nothing(root):
	ctx = Context(HTTPRequest.Create("/missing.txt"))
	with pytest.raises(FileNotFoundError):
		ResultFile(root / "missing.txt").do(ctx)
	assert ctx.writer.status is None
	assert ctx.writer.headers == {}
	assert ctx.writer.written == 0


def test_serve_file(root):
	ctx = serve(root / "hello.txt", "/hello.txt")
	w = ctx.writer
	assert w.status == 200
	assert w.header("Content-Type") == "text/plain; charset=utf-8"
	assert w.header("Content-Length") == str(len(CONTENT))
	assert w.header("Accept-Ranges") == "bytes"
	assert w.header("Last-Modified") == httpdate(mtime(root / "hello.txt"))
	assert bytes(w.body) == CONTENT


def test_serve_file_from_string_path(root):
	ctx = serve(str(root / "hello.txt"))
	assert bytes(ctx.writer.body) == CONTENT


def test_head_has_no_body(root):
	ctx = serve(root / "hello.txt", method="HEAD")
	assert ctx.writer.status == 200
	assert ctx.writer.header("Content-Length") == str(len(CONTENT))
	assert bytes(ctx.writer.body) == b""


def test_preset_content_type_is_kept(root):
	ctx = Context(HTTPRequest.Create("/hello.txt"))
	ctx.writer.setHeader("Content-Type", "application/x-greeting")
	ResultFile(root / "hello.txt").do(ctx)
	assert ctx.writer.header("Content-Type") == "application/x-greeting"


def test_unknown_extension_is_sniffed(root):
	(root / "blob").write_bytes(b"\x00\x01\x02")
	ctx = serve(root / "blob")
	assert ctx.writer.header("Content-Type") == "application/octet-stream"


# -----------------------------------------------------------------------------
# CONDITIONAL REQUESTS
# -----------------------------------------------------------------------------


def test_not_modified(root):
	path = root / "hello.txt"
	ctx = serve(path, If_Modified_Since=httpdate(mtime(path) + 60))
	w = ctx.writer
	assert w.status == 304
	assert w.header("Content-Type") is None
	assert w.header("Content-Length") is None
	assert bytes(w.body) == b""


def test_modified(root):
	path = root / "hello.txt"
	ctx = serve(path, If_Modified_Since=httpdate(mtime(path) - 60))
	assert ctx.writer.status == 200
	assert bytes(ctx.writer.body) == CONTENT


def test_modified_since_ignored_for_post(root):
	path = root / "hello.txt"
	ctx = serve(path, method="POST", If_Modified_Since=httpdate(mtime(path) + 60))
	assert ctx.writer.status == 200


def test_precondition_failed(root):
	path = root / "hello.txt"
	ctx = serve(path, If_Unmodified_Since=httpdate(mtime(path) - 60))
	assert ctx.writer.status == 412
	assert bytes(ctx.writer.body) == b""


def test_invalid_date_is_ignored(root):
	ctx = serve(root / "hello.txt", If_Modified_Since="not a date")
	assert ctx.writer.status == 200


# -----------------------------------------------------------------------------
# RANGES
# -----------------------------------------------------------------------------


def test_single_range(root):
	ctx = serve(root / "hello.txt", Range="bytes=0-4")
	w = ctx.writer
	assert w.status == 206
	assert w.header("Content-Range") == "bytes 0-4/11"
	assert w.header("Content-Length") == "5"
	assert bytes(w.body) == b"hello"


def test_suffix_range(root):
	ctx = serve(root / "hello.txt", Range="bytes=-5")
	assert ctx.writer.status == 206
	assert bytes(ctx.writer.body) == b"world"


def test_multiple_ranges(root):
	ctx = serve(root / "hello.txt", Range="bytes=0-0,6-7")
	w = ctx.writer
	assert w.status == 206
	content_type = w.header("Content-Type")
	assert content_type.startswith("multipart/byteranges; boundary=")
	boundary = content_type.split("boundary=", 1)[1]
	data = bytes(w.body)
	assert w.header("Content-Length") == str(len(data))
	assert data.startswith(f"--{boundary}\r\n".encode())
	assert data.endswith(f"\r\n--{boundary}--\r\n".encode())
	assert b"Content-Range: bytes 0-0/11\r\n" in data
	assert b"Content-Range: bytes 6-7/11\r\n" in data
	assert b"\r\n\r\nh\r\n" in data
	assert b"\r\n\r\nwo\r\n" in data


def test_unsatisfiable_range(root):
	ctx = serve(root / "hello.txt", Range="bytes=20-")
	w = ctx.writer
	assert w.status == 416
	assert w.header("Content-Range") == "bytes */11"
	assert w.header("Content-Type") == "text/plain; charset=utf-8"


def test_range_larger_than_content_is_ignored(root):
	ctx = serve(root / "hello.txt", Range="bytes=0-9,0-9")
	assert ctx.writer.status == 200
	assert bytes(ctx.writer.body) == CONTENT


def test_stale_if_range_serves_whole_file(root):
	path = root / "hello.txt"
	ctx = serve(path, Range="bytes=0-4", If_Range=httpdate(mtime(path) - 60))
	assert ctx.writer.status == 200
	assert bytes(ctx.writer.body) == CONTENT


def test_fresh_if_range_serves_range(root):
	path = root / "hello.txt"
	ctx = serve(path, Range="bytes=0-4", If_Range=httpdate(mtime(path)))
	assert ctx.writer.status == 206


def test_entity_tag_if_range_serves_whole_file(root):
	ctx = serve(root / "hello.txt", Range="bytes=0-4", If_Range='"abc"')
	assert ctx.writer.status == 200


# -----------------------------------------------------------------------------
# DIRECTORIES
# -----------------------------------------------------------------------------


def test_directory_redirects_to_slash(root):
	ctx = serve(root / "site", "/docs/site?lang=en")
	assert ctx.writer.status == 301
	assert ctx.writer.header("Location") == "site/?lang=en"


def test_directory_redirect_keeps_raw_query(root):
	ctx = serve(root / "site", "/site?flag&a=1&a=2")
	assert ctx.writer.status == 301
	assert ctx.writer.header("Location") == "site/?flag&a=1&a=2"


def test_directory_index(root):
	ctx = serve(root / "site", "/site/")
	assert ctx.writer.status == 200
	assert ctx.writer.header("Content-Type") == "text/html; charset=utf-8"
	assert bytes(ctx.writer.body) == b"<h1>Index</h1>"


def test_directory_listing(root):
	ctx = serve(root / "empty", "/empty/")
	assert ctx.writer.status == 200
	assert ctx.writer.header("Content-Type") == "text/html; charset=utf-8"
	data = bytes(ctx.writer.body)
	assert data.startswith(b"<!DOCTYPE html>\n")
	assert b"Listing for /empty/" in data
	assert b'<a href="a%20b.txt">a b.txt</a>' in data


# EOF

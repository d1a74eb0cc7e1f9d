import os
import secrets
from email.utils import formatdate, parsedate_to_datetime
from pathlib import Path
from typing import BinaryIO, NamedTuple
from urllib.parse import quote

from .. import config
from ..utils.files import contentType as guessContentType
from ..utils.htmpl import H, Node, html
from ..utils.logging import debug
from .model import HTTPRequest, HTTPResponseWriter

# --
# == File Transfer
#
# Serves a file from the local filesystem, supporting conditional requests
# (`If-Modified-Since`, `If-Unmodified-Since`, `If-Range`) and byte
# ranges. Directories are served through their `index.html` or listed.


INDEX_PAGE: str = "index.html"

LISTING_CSS: str = """
:root {
	font-family: sans-serif;
	font-size: 14px;
	line-height: 1.35em;
	padding: 20px;
}
ul {
	padding: 0px 20px;
}
li {
	margin: 0.5em 0em;
}
"""


class RangeError(ValueError):
	"""The `Range` header is malformed or can't be satisfied."""


class ByteRange(NamedTuple):
	start: int
	length: int

	def contentRange(self, size: int) -> str:
		return f"bytes {self.start}-{self.start + self.length - 1}/{size}"


# -----------------------------------------------------------------------------
#
# HELPERS
#
# -----------------------------------------------------------------------------


def httpdate(timestamp: float) -> str:
	return formatdate(timestamp, usegmt=True)


def parseHTTPDate(value: str | None) -> int | None:
	"""Parses an HTTP date into a timestamp, returning `None` when the date
	is invalid."""
	if not value:
		return None
	try:
		return int(parsedate_to_datetime(value).timestamp())
	except (TypeError, ValueError):
		return None


def parseRange(value: str, size: int) -> list[ByteRange]:
	"""Parses a `Range` header value (`bytes=0-99,-50`) for content of the
	given size. Ranges starting past the end are ignored, unless none
	overlaps the content, in which case a `RangeError` is raised."""
	if not value:
		return []
	unit: str = "bytes="
	if not value.startswith(unit):
		raise RangeError("invalid range")
	res: list[ByteRange] = []
	no_overlap: bool = False
	for item in value[len(unit) :].split(","):
		item = item.strip(" \t")
		if not item:
			continue
		start, sep, end = item.partition("-")
		start, end = start.strip(" \t"), end.strip(" \t")
		if not sep:
			raise RangeError("invalid range")
		if not start:
			# A suffix range, as in the last N bytes
			if not end.isdigit():
				raise RangeError("invalid range")
			n: int = min(int(end), size)
			if n == 0:
				no_overlap = True
				continue
			res.append(ByteRange(size - n, n))
		else:
			if not start.isdigit():
				raise RangeError("invalid range")
			i: int = int(start)
			if i >= size:
				no_overlap = True
				continue
			if not end:
				res.append(ByteRange(i, size - i))
			elif not end.isdigit() or int(end) < i:
				raise RangeError("invalid range")
			else:
				res.append(ByteRange(i, min(int(end), size - 1) - i + 1))
	if no_overlap and not res:
		raise RangeError("invalid range: failed to overlap")
	return res


def fail(writer: HTTPResponseWriter, status: int, message: str) -> None:
	"""Writes a plain text error response."""
	writer.setHeader("Content-Type", "text/plain; charset=utf-8")
	writer.setHeader("X-Content-Type-Options", "nosniff")
	writer.writeHeader(status)
	writer.write(f"{message}\n".encode("utf8"))


def failFromError(writer: HTTPResponseWriter, error: OSError) -> None:
	if isinstance(error, FileNotFoundError):
		fail(writer, 404, "404 page not found")
	elif isinstance(error, PermissionError):
		fail(writer, 403, "403 Forbidden")
	else:
		fail(writer, 500, "500 Internal Server Error")


def localRedirect(
	writer: HTTPResponseWriter, request: HTTPRequest, path: str
) -> None:
	"""Redirects to a path relative to the current one, keeping the query."""
	if request.rawQuery:
		path = f"{path}?{request.rawQuery}"
	writer.setHeader("Location", path)
	writer.writeHeader(301)


def notModified(writer: HTTPResponseWriter) -> None:
	# RFC 7232 section 4.1: a 304 should not carry representation headers
	for name in ("Content-Type", "Content-Length", "Content-Encoding"):
		writer.setHeader(name, None)
	writer.writeHeader(304)


def isModifiedSince(request: HTTPRequest, modtime: int) -> bool:
	if request.method not in ("GET", "HEAD"):
		return True
	since: int | None = parseHTTPDate(request.header("If-Modified-Since"))
	return since is None or modtime > since


def isUnmodifiedSince(request: HTTPRequest, modtime: int) -> bool:
	since: int | None = parseHTTPDate(request.header("If-Unmodified-Since"))
	return since is None or modtime <= since


def isRangeFresh(request: HTTPRequest, modtime: int) -> bool:
	"""Tells if the `Range` should be honoured given the `If-Range` header.
	We don't produce entity tags, so only dates can match."""
	value: str | None = request.header("If-Range")
	if not value:
		return True
	elif value.startswith('"') or value.startswith("W/"):
		return False
	else:
		return parseHTTPDate(value) == modtime


# -----------------------------------------------------------------------------
#
# SERVING
#
# -----------------------------------------------------------------------------


def serveFile(
	writer: HTTPResponseWriter, request: HTTPRequest, path: Path | str
) -> None:
	"""Writes a complete response for the file at the given path, the status
	being managed here (200, 206, 301, 304, 403, 404, 412, 416)."""
	local_path: Path = path if isinstance(path, Path) else Path(path)
	try:
		stats = local_path.stat()
	except OSError as e:
		return failFromError(writer, e)
	if local_path.is_dir():
		url: str = request.path
		if not url.endswith("/"):
			return localRedirect(writer, request, f"{os.path.basename(url)}/")
		index_path = local_path / INDEX_PAGE
		if index_path.is_file():
			local_path, stats = index_path, index_path.stat()
		else:
			modtime = int(stats.st_mtime)
			if not isModifiedSince(request, modtime):
				return notModified(writer)
			writer.setHeader("Last-Modified", httpdate(modtime))
			return serveListing(writer, request, local_path)
	return serveContent(writer, request, local_path, int(stats.st_mtime), stats.st_size)


def serveContent(
	writer: HTTPResponseWriter,
	request: HTTPRequest,
	path: Path,
	modtime: int,
	size: int,
) -> None:
	writer.setHeader("Last-Modified", httpdate(modtime))
	if not isUnmodifiedSince(request, modtime):
		writer.writeHeader(412)
		return None
	if not isModifiedSince(request, modtime):
		return notModified(writer)
	try:
		content_type: str = writer.header("Content-Type") or guessContentType(path)
		with open(path, "rb") as f:
			status: int = 200
			ranges: list[ByteRange] = []
			parts: list[tuple[bytes, ByteRange]] = []
			closing: bytes = b""
			range_header: str | None = request.header("Range")
			if range_header and isRangeFresh(request, modtime):
				try:
					ranges = parseRange(range_header, size)
				except RangeError as e:
					writer.setHeader("Content-Range", f"bytes */{size}")
					return fail(writer, 416, str(e))
				# A client requesting more than the content gets it whole
				if sum(_.length for _ in ranges) > size:
					ranges = []
			if len(ranges) == 1:
				status = 206
				writer.setHeader("Content-Type", content_type)
				writer.setHeader("Content-Range", ranges[0].contentRange(size))
				writer.setHeader("Content-Length", ranges[0].length)
			elif ranges:
				status = 206
				boundary: str = secrets.token_hex(16)
				parts = [
					(partHead(boundary, r, size, content_type, first=i == 0), r)
					for i, r in enumerate(ranges)
				]
				closing = f"\r\n--{boundary}--\r\n".encode("latin-1")
				writer.setHeader(
					"Content-Type", f"multipart/byteranges; boundary={boundary}"
				)
				writer.setHeader(
					"Content-Length",
					sum(len(h) + r.length for h, r in parts) + len(closing),
				)
			else:
				writer.setHeader("Content-Type", content_type)
				writer.setHeader("Content-Length", size)
			writer.setHeader("Accept-Ranges", "bytes")
			writer.writeHeader(status)
			debug("Serving file", Path=str(path), Status=status, Ranges=len(ranges))
			if request.method == "HEAD":
				return None
			elif len(ranges) > 1:
				for head, r in parts:
					writer.write(head)
					copyRange(writer, f, r)
				writer.write(closing)
			else:
				copyRange(writer, f, ranges[0] if ranges else ByteRange(0, size))
	except OSError as e:
		if writer.committed:
			raise
		return failFromError(writer, e)
	return None


def partHead(
	boundary: str, r: ByteRange, size: int, contentType: str, *, first: bool
) -> bytes:
	"""Returns the delimiter and headers preceding a `multipart/byteranges`
	part."""
	return (
		("" if first else "\r\n")
		+ f"--{boundary}\r\n"
		+ f"Content-Range: {r.contentRange(size)}\r\n"
		+ f"Content-Type: {contentType}\r\n\r\n"
	).encode("latin-1")


def copyRange(writer: HTTPResponseWriter, f: BinaryIO, r: ByteRange) -> int:
	"""Copies the given range of the open file `f` to the writer."""
	f.seek(r.start)
	left: int = r.length
	while left > 0 and (chunk := f.read(min(left, config.FILE_CHUNK_SIZE))):
		writer.write(chunk)
		left -= len(chunk)
	return r.length - left


def serveListing(
	writer: HTTPResponseWriter, request: HTTPRequest, path: Path
) -> None:
	"""Writes an HTML listing of the given directory."""
	dirs: list[Node] = []
	files: list[Node] = []
	for p in sorted(path.iterdir()):
		if p.is_dir():
			dirs.append(H.li(H.a(f"{p.name}/", href=f"{quote(p.name)}/")))
		else:
			files.append(H.li(H.a(p.name, href=quote(p.name))))
	nodes: list[Node] = []
	if dirs:
		nodes.append(H.section(H.h2("Directories"), H.ul(*dirs)))
	if files:
		nodes.append(H.section(H.h2("Files"), H.ul(*files)))
	writer.setHeader("Content-Type", "text/html; charset=utf-8")
	writer.writeHeader(200)
	writer.write(
		"".join(
			html(
				H.html(
					H.head(
						H.meta(charset="utf-8"),
						H.meta(name="viewport", content="width=device-width"),
						H.title(request.path),
						H.style(LISTING_CSS),
					),
					H.body(H.h1("Listing for ", request.path), *nodes),
				),
				doctype="html",
			)
		).encode("utf8")
	)


# EOF

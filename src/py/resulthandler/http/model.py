from typing import Iterable, TypeVar, Callable
from urllib.parse import urlsplit, parse_qs

from ..utils.files import sniff
from ..utils.logging import warning
from .status import HTTP_STATUS

T = TypeVar("T")

# -----------------------------------------------------------------------------
#
# HELPERS
#
# -----------------------------------------------------------------------------


def headername(name: str, *, headers: dict[str, str] = {}) -> str:
	"""Normalizes the header name as `Kebab-Case`."""
	if name in headers:
		return headers[name]
	key: str = name.lower()
	if key in headers:
		return headers[key]
	else:
		normalized: str = "-".join(_.capitalize() for _ in name.split("-"))
		headers[key] = normalized
		return normalized


def bodyAllowed(status: int) -> bool:
	"""Tells if a response with the given status may carry a body."""
	return not (100 <= status < 200 or status == 204 or status == 304)


# -----------------------------------------------------------------------------
#
# ERRORS
#
# -----------------------------------------------------------------------------


class HTTPWriteError(Exception):
	"""Raised when bytes can't be written to a response, because the writer
	was closed (ie. the client went away) or the status does not allow a
	body."""

	def __init__(self, message: str, status: int | None = None):
		super().__init__(message)
		self.message: str = message
		self.status: int | None = status


# -----------------------------------------------------------------------------
#
# REQUESTS
#
# -----------------------------------------------------------------------------


class HTTPRequest:
	"""Represents the originating HTTP request, as needed by results that
	inspect the method, path or conditional headers."""

	__slots__ = ["protocol", "method", "path", "query", "rawQuery", "headers"]

	@staticmethod
	def Create(
		url: str = "/",
		method: str = "GET",
		headers: dict[str, str] | None = None,
		protocol: str = "HTTP/1.1",
	) -> "HTTPRequest":
		"""Creates a request from a raw request target like `/path?q=1`."""
		parts = urlsplit(url)
		return HTTPRequest(
			method=method,
			path=parts.path or "/",
			query={k: v[0] for k, v in parse_qs(parts.query).items()},
			rawQuery=parts.query,
			headers=headers,
			protocol=protocol,
		)

	def __init__(
		self,
		method: str,
		path: str,
		query: dict[str, str] | None = None,
		headers: dict[str, str] | None = None,
		protocol: str = "HTTP/1.1",
		rawQuery: str = "",
	):
		self.method: str = method.upper()
		self.path: str = path
		self.query: dict[str, str] = query or {}
		# Undecoded query string, as received
		self.rawQuery: str = rawQuery
		self.protocol: str = protocol
		self.headers: dict[str, str] = (
			{headername(k): v for k, v in headers.items()} if headers else {}
		)

	def header(self, name: str) -> str | None:
		return self.headers.get(headername(name))

	def param(
		self,
		name: str,
		default: T | None = None,
		processor: Callable[[str | T | None], str | T | None] | None = None,
	) -> str | T | None:
		v = self.query.get(name, default)
		return processor(v) if processor else v

	def __str__(self) -> str:
		return f"Request({self.method} {self.path}{f'?{self.rawQuery}' if self.rawQuery else ''} {self.headers})"


# -----------------------------------------------------------------------------
#
# RESPONSE WRITER
#
# -----------------------------------------------------------------------------


class HTTPResponseWriter:
	"""The response sink, accumulating the status, headers and body of one
	HTTP response. Headers can be changed up until the status is written,
	the first status written wins."""

	__slots__ = [
		"method",
		"protocol",
		"status",
		"headers",
		"body",
		"written",
		"closed",
	]

	def __init__(self, method: str = "GET", protocol: str = "HTTP/1.1"):
		self.method: str = method.upper()
		self.protocol: str = protocol
		self.status: int | None = None
		self.headers: dict[str, str] = {}
		self.body: bytearray = bytearray()
		self.written: int = 0
		self.closed: bool = False

	@property
	def committed(self) -> bool:
		return self.status is not None

	def header(self, name: str) -> str | None:
		return self.headers.get(headername(name))

	def hasHeader(self, name: str) -> bool:
		return headername(name) in self.headers

	def setHeader(self, name: str, value: str | int | None) -> "HTTPResponseWriter":
		"""Sets (or removes when `value` is `None`) the given header. This has
		no effect once the status was written."""
		if self.committed:
			warning(
				"Header change after status was written, ignored",
				Header=name,
				Status=self.status,
			)
		elif value is None:
			self.headers.pop(headername(name), None)
		else:
			self.headers[headername(name)] = str(value)
		return self

	def setHeaders(
		self, headers: dict[str, str | int | None]
	) -> "HTTPResponseWriter":
		for k, v in headers.items():
			self.setHeader(k, v)
		return self

	def writeHeader(self, status: int) -> "HTTPResponseWriter":
		"""Writes the status, freezing the headers. Superfluous calls are
		ignored."""
		if status < 100 or status > 999:
			raise ValueError(f"Invalid HTTP status code: {status}")
		if self.committed:
			warning(
				"Superfluous writeHeader call, ignored",
				Status=self.status,
				Ignored=status,
			)
		else:
			self.status = status
		return self

	def write(self, data: bytes | bytearray | memoryview) -> int:
		"""Writes the given bytes to the body, writing a `200` status first
		when none was written. Returns the number of bytes written."""
		if self.closed:
			raise HTTPWriteError("Response writer is closed", self.status)
		if not self.committed:
			self.writeHeader(200)
		status: int = self.status or 200
		if not data:
			return 0
		if not bodyAllowed(status):
			raise HTTPWriteError(
				f"Response with status {status} does not allow a body", status
			)
		if not self.written and "Content-Type" not in self.headers:
			# Sniffed content type is set even after the status was written
			self.headers["Content-Type"] = sniff(bytes(data))
		n: int = len(data)
		# Responses to HEAD only keep track of the length
		if self.method != "HEAD":
			self.body += data
		self.written += n
		return n

	def close(self) -> "HTTPResponseWriter":
		self.closed = True
		return self

	@property
	def message(self) -> str:
		return HTTP_STATUS.get(self.status or 200, "Unknown status")

	def iterHeaders(self) -> Iterable[tuple[str, str]]:
		yield from self.headers.items()

	def head(self) -> bytes:
		"""Serializes the status line and headers as a payload."""
		lines: list[str] = [f"{k}: {v}" for k, v in self.iterHeaders()]
		lines.insert(0, f"{self.protocol} {self.status or 200} {self.message}")
		lines.append("")
		lines.append("")
		return "\r\n".join(lines).encode("latin-1")

	def __str__(self) -> str:
		return f"ResponseWriter({self.protocol} {self.status} {self.headers} {self.written} bytes)"


# EOF

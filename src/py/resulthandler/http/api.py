from abc import ABC, abstractmethod

from .model import HTTPRequest, HTTPResponseWriter

# --
# == Web Context
#
# The capability handed to results when they render: it gives access to the
# response sink and to the originating request.


class WebContext(ABC):
	@property
	@abstractmethod
	def writer(self) -> HTTPResponseWriter: ...

	@property
	@abstractmethod
	def request(self) -> HTTPRequest: ...


class Context(WebContext):
	"""A context for one request/response exchange."""

	__slots__ = ["_request", "_writer"]

	def __init__(
		self,
		request: HTTPRequest | None = None,
		writer: HTTPResponseWriter | None = None,
	):
		self._request: HTTPRequest = request or HTTPRequest.Create()
		self._writer: HTTPResponseWriter = writer or HTTPResponseWriter(
			method=self._request.method, protocol=self._request.protocol
		)

	@property
	def writer(self) -> HTTPResponseWriter:
		return self._writer

	@property
	def request(self) -> HTTPRequest:
		return self._request

	def __str__(self) -> str:
		return f"Context({self._request}, {self._writer})"


# EOF

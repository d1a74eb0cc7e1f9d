import inspect
from typing import Any, Awaitable, Callable, Coroutine, TypeAlias
from urllib.parse import parse_qs

from ..http.api import Context, WebContext
from ..http.model import HTTPRequest, HTTPResponseWriter, bodyAllowed
from ..result import Result, ResultText, render
from ..utils.logging import debug, exception, warning

# --
# ## ASGI Bridge
#
# Exposes a handler returning results through the ASGI gateway. There is no
# routing here: the handler gets every request and picks its result.

# SEE: https://asgi.readthedocs.io/en/latest/specs/main.html

TScope: TypeAlias = dict[str, Any]
TReceive: TypeAlias = Callable[[], Awaitable[dict[str, Any]]]
TSend: TypeAlias = Callable[[dict[str, Any]], Awaitable[None]]
THandler: TypeAlias = Callable[[WebContext], Result | Awaitable[Result]]
TApplication: TypeAlias = Callable[[TScope, TReceive, TSend], Coroutine[Any, Any, None]]


def requestFromScope(scope: TScope) -> HTTPRequest:
	"""Creates a request from an ASGI HTTP scope."""
	query: str = (scope.get("query_string") or b"").decode("latin-1")
	return HTTPRequest(
		method=scope.get("method", "GET"),
		path=scope.get("path") or "/",
		query={k: v[0] for k, v in parse_qs(query).items()},
		rawQuery=query,
		# NOTE: Repeated headers are not merged, the last one wins
		headers={
			k.decode("latin-1"): v.decode("latin-1")
			for k, v in scope.get("headers") or ()
		},
		protocol=f"HTTP/{scope.get('http_version', '1.1')}",
	)


async def writeToASGI(writer: HTTPResponseWriter, send: TSend) -> None:
	"""Sends the buffered response through ASGI."""
	status: int = writer.status or 200
	headers: list[tuple[bytes, bytes]] = [
		(k.lower().encode("latin-1"), v.encode("latin-1"))
		for k, v in writer.iterHeaders()
	]
	if not writer.hasHeader("Content-Length") and bodyAllowed(status):
		headers.append((b"content-length", str(writer.written).encode("ascii")))
	await send({"type": "http.response.start", "status": status, "headers": headers})
	await send({"type": "http.response.body", "body": bytes(writer.body), "more_body": False})


async def onASGILifespan(receive: TReceive, send: TSend) -> None:
	"""Acknowledges lifespan messages, there is nothing to start or stop."""
	# SEE: https://asgi.readthedocs.io/en/latest/specs/lifespan.html
	while True:
		message = await receive()
		if message["type"] == "lifespan.startup":
			await send({"type": "lifespan.startup.complete"})
		elif message["type"] == "lifespan.shutdown":
			await send({"type": "lifespan.shutdown.complete"})
			return None


def asgi(handler: THandler) -> TApplication:
	"""Creates an ASGI application that renders the result returned by
	`handler` for each request. Failures before the response is committed
	produce a `500`, after that whatever was written is sent."""

	async def application(scope: TScope, receive: TReceive, send: TSend) -> None:
		protocol: str = scope["type"]
		if protocol == "lifespan":
			return await onASGILifespan(receive, send)
		elif protocol != "http":
			warning("Unsupported ASGI protocol", Protocol=protocol)
			return None
		request: HTTPRequest = requestFromScope(scope)
		context: WebContext = Context(request)
		failed: bool = False
		try:
			result = handler(context)
			if inspect.isawaitable(result):
				result = await result
		except Exception as e:
			exception(e, f"Handler failed for {request.method} {request.path}")
			failed = True
		else:
			try:
				render(result, context)
			except Exception:
				# Already logged by `render`
				failed = True
		if failed and not context.writer.committed:
			context = Context(request)
			render(ResultText("Internal Server Error", 500), context)
		debug(
			"Response",
			Method=request.method,
			Path=request.path,
			Status=context.writer.status,
			Written=context.writer.written,
		)
		await writeToASGI(context.writer, send)

	return application


# EOF

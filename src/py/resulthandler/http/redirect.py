import posixpath
from urllib.parse import quote, urlsplit

from ..utils.htmpl import escape
from .model import HTTPRequest, HTTPResponseWriter, bodyAllowed
from .status import statusText

# SEE: https://developer.mozilla.org/en-US/docs/Web/HTTP/Redirections


def escapeNonASCII(url: str) -> str:
	"""Percent-encodes the non-ASCII characters of the URL, so that it can be
	used as a header value."""
	return "".join(_ if ord(_) < 128 else quote(_, safe="") for _ in url)


def resolveURL(request: HTTPRequest, url: str) -> str:
	"""Resolves the given URL relative to the request path, unless it
	is absolute (ie. has a scheme or a host)."""
	parts = urlsplit(url)
	if parts.scheme or parts.netloc:
		return url
	if not url or not url.startswith("/"):
		current: str = request.path or "/"
		url = current[: current.rfind("/") + 1] + url
		if not url.startswith("/"):
			url = f"/{url}"
	query: str = ""
	if (i := url.find("?")) != -1:
		url, query = url[:i], url[i:]
	trailing: bool = url.endswith("/")
	url = posixpath.normpath(url)
	# `normpath` keeps a leading double slash, which would make a host
	if url.startswith("//"):
		url = "/" + url.lstrip("/")
	if trailing and not url.endswith("/"):
		url += "/"
	return url + query


def redirect(
	writer: HTTPResponseWriter, request: HTTPRequest, url: str, status: int
) -> None:
	"""Writes a redirect response to `url` with the given status. Responses
	to `GET` get a small HTML body linking to the target, unless a content
	type was already set."""
	location: str = escapeNonASCII(resolveURL(request, url))
	had_content_type: bool = writer.hasHeader("Content-Type")
	writer.setHeader("Location", location)
	if not had_content_type and request.method in ("GET", "HEAD"):
		writer.setHeader("Content-Type", "text/html; charset=utf-8")
	writer.writeHeader(status)
	# NOTE: There's no body for POST (the client won't show it) nor HEAD.
	if not had_content_type and request.method == "GET" and bodyAllowed(status):
		writer.write(
			f'<a href="{escape(location)}">{statusText(status)}</a>.\n\n'.encode("utf8")
		)


# EOF

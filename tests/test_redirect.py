import pytest

from resulthandler import Context, HTTPRequest, ResultRedirect
from resulthandler.http.redirect import resolveURL


def redirect(url: str, code: int = 0, path: str = "/a/b", method: str = "GET") -> Context:
	ctx = Context(HTTPRequest.Create(path, method=method))
	ResultRedirect(url, code).do(ctx)
	return ctx


def test_redirect_defaults_to_see_other():
	ctx = redirect("/login")
	w = ctx.writer
	assert w.status == 303
	assert w.header("Location") == "/login"
	assert w.header("Content-Type") == "text/html; charset=utf-8"
	assert bytes(w.body) == b'<a href="/login">See Other</a>.\n\n'


def test_redirect_code():
	ctx = redirect("/moved", 301)
	assert ctx.writer.status == 301
	assert ctx.writer.header("Location") == "/moved"
	assert bytes(ctx.writer.body) == b'<a href="/moved">Moved Permanently</a>.\n\n'


def test_redirect_code_is_not_stored():
	result = ResultRedirect("/x")
	result.do(Context(HTTPRequest.Create("/")))
	assert result.code == 0


def test_redirect_post_has_no_body():
	ctx = redirect("/done", method="POST")
	assert ctx.writer.status == 303
	assert ctx.writer.header("Content-Type") is None
	assert bytes(ctx.writer.body) == b""


def test_redirect_head_has_no_body():
	ctx = redirect("/done", method="HEAD")
	assert ctx.writer.header("Content-Type") == "text/html; charset=utf-8"
	assert bytes(ctx.writer.body) == b""


def test_redirect_keeps_preset_content_type():
	ctx = Context(HTTPRequest.Create("/"))
	ctx.writer.setHeader("Content-Type", "application/json")
	ResultRedirect("/x", 307).do(ctx)
	assert ctx.writer.header("Content-Type") == "application/json"
	assert bytes(ctx.writer.body) == b""


def test_redirect_escapes_body():
	ctx = redirect("/search?q=<b>&x='1'")
	assert bytes(ctx.writer.body) == (
		b'<a href="/search?q=&lt;b&gt;&amp;x=&#39;1&#39;">See Other</a>.\n\n'
	)


def test_redirect_non_ascii_location():
	ctx = redirect("/café")
	assert ctx.writer.header("Location") == "/caf%C3%A9"


@pytest.mark.parametrize(
	"path,url,expected",
	[
		("/a/b", "c", "/a/c"),
		("/a/b/", "c", "/a/b/c"),
		("/a/b/c", "../x?y=1", "/a/x?y=1"),
		("/a/b", "./d/", "/a/d/"),
		("/a/b", "/x//y/../z", "/x/z"),
		("/a/b", "//example.com/../x", "//example.com/../x"),
		("/", "", "/"),
		("/a/b", "https://example.com/p", "https://example.com/p"),
	],
)
def test_resolve_url(path, url, expected):
	assert resolveURL(HTTPRequest.Create(path), url) == expected


# EOF

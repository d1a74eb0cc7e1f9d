from pathlib import Path

from resulthandler import (
	HTMPLTemplate,
	Result,
	ResultCSV,
	ResultFile,
	ResultHTML,
	ResultJSON,
	ResultRedirect,
	ResultText,
	WebContext,
	asgi,
)
from resulthandler.utils.htmpl import H

# --
# Serves a few results, run with any ASGI server:
#
#   uvicorn examples.results:app

ROOT: Path = Path(__file__).parent

page = HTMPLTemplate(
	lambda data: H.html(H.body(H.h1(data["title"]), H.ul(*(H.li(_) for _ in data["links"])))),
	doctype="html",
)


def handler(context: WebContext) -> Result:
	path: str = context.request.path
	if path == "/":
		return ResultHTML(
			template=page,
			data={"title": "Results", "links": ["/hello", "/api", "/export.csv", "/files/"]},
		)
	elif path == "/hello":
		return ResultText(f"Hello, {context.request.param('name', 'World')} !")
	elif path == "/api":
		return ResultJSON({"path": path, "query": context.request.query})
	elif path == "/export.csv":
		return ResultCSV([["名前", "点数"], ["山田", "90"]], attachment=True)
	elif path.startswith("/files/"):
		local: Path = (ROOT / path[len("/files/") :]).resolve()
		if not local.is_relative_to(ROOT.resolve()):
			return ResultText("Forbidden", 403)
		elif not local.exists():
			return ResultText("Not Found", 404)
		else:
			return ResultFile(local)
	else:
		return ResultRedirect("/")


app = asgi(handler)

# EOF

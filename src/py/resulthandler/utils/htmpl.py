from typing import (
	LiteralString,
	Optional,
	Iterable,
	Iterator,
	Union,
	Callable,
	cast,
)
from mypy_extensions import KwArg, VarArg

# --
# HTMPL defines functions to create HTML documents as trees of nodes, which
# are used by templates and generated pages (directory listings, redirects).

HTML_EMPTY: list[LiteralString] = (
	"area base br col embed hr img input link meta param source track wbr".split()
)
HTML_ESCAPED = str.maketrans(
	{"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&#39;"}
)
HTML_QUOTED = str.maketrans({"&": "&amp;", '"': "&quot;"})


def escape(text: str) -> str:
	return text.translate(HTML_ESCAPED)


def quoted(text: Optional[str]) -> str:
	return text.translate(HTML_QUOTED) if text else ""


TNodeContent = Union["Node", str, bool, float, int, None]
TAttributeContent = str | bool | float | int | None


class Node:
	__slots__ = ["name", "attributes", "children"]

	def __init__(
		self,
		name: str,
		children: Optional[Iterable[TNodeContent]] = None,
		attributes: Optional[dict[str, TAttributeContent]] = None,
	):
		self.name = name
		self.attributes: dict[str, TAttributeContent] = attributes or {}
		self.children: list[TNodeContent] = [_ for _ in children] if children else []

	def iterChildren(self) -> Iterator[str]:
		for _ in self.children:
			if isinstance(_, Node):
				yield from _.iterHTML()
			elif _ is None:
				pass
			else:
				yield escape(str(_))

	def iterHTML(self) -> Iterator[str]:
		if self.name == "#raw":
			yield str(self.attributes.get("#value") or "")
		elif self.name == "#text":
			yield escape(str(self.attributes.get("#value") or ""))
		elif self.name == "--":
			yield "<!--"
			yield from self.iterChildren()
			yield "-->"
		else:
			yield f"<{self.name}"
			for k, v in self.attributes.items():
				yield f' {k}="{quoted(str(v))}"' if v is not None else f" {k}"
			if not self.children:
				yield ">" if self.name in HTML_EMPTY else f"></{self.name}>"
			else:
				yield ">"
				yield from self.iterChildren()
				yield f"</{self.name}>"

	def __call__(self, *content: Union[str, "Node"]) -> "Node":
		for _ in content:
			self.children.append(text(_) if isinstance(_, str) else _)
		return self

	def __str__(self) -> str:
		return "".join(self.iterHTML())


def text(text: str) -> Node:
	return Node("#text", attributes={"#value": text})


def raw(html: str) -> Node:
	return Node("#raw", attributes={"#value": html})


NodeFactory = Callable[
	[
		VarArg(TNodeContent | Iterable[TNodeContent]),
		KwArg(TAttributeContent),
	],
	Node,
]


def nodeFactory(name: str) -> NodeFactory:
	def f(*children: TNodeContent, **attributes: TAttributeContent) -> Node:
		content: list[TNodeContent] = []
		for _ in children:
			if isinstance(_, (list, tuple)):
				content += list(_)
			else:
				content.append(_)
		attrs: dict[str, TAttributeContent] = {}
		for k, v in attributes.items():
			# `_` stands for `class`, which is a reserved word
			attrs["class" if k == "_" else k] = v
		return Node(
			name,
			children=[text(_) if isinstance(_, str) else _ for _ in content],
			attributes=attrs,
		)

	f.__name__ = name
	return cast(NodeFactory, f)


HTML_TAGS: list[LiteralString] = (
	"""\
a abbr address article aside b blockquote body br button caption code col
colgroup dd details div dl dt em footer form h1 h2 h3 h4 h5 h6 head header hr
html i img input label li link main meta nav ol p pre section small span strong
style summary table tbody td textarea tfoot th thead title tr ul\
""".split()
)


class Markup:
	__slots__ = ["_factories", "_name"]

	def __init__(self, name: str, factories: dict[str, NodeFactory]):
		self._name: str = name
		self._factories: dict[str, NodeFactory] = factories

	def __getattr__(self, name: str) -> NodeFactory:
		factories = self._factories
		if name not in factories:
			raise AttributeError(
				f"No tag {name}, pick one of {','.join(factories.keys())}"
			)
		else:
			return factories[name]


def markup(name: str, tags: list[str] | list[LiteralString]) -> Markup:
	return Markup(name, {_: nodeFactory(_) for _ in tags})


H: Markup = markup("html", HTML_TAGS)


def html(*nodes: Node | str, doctype: str | None = None) -> Iterator[str]:
	"""Iterates on the HTML serialization of the given nodes, strings being
	escaped."""
	if doctype:
		yield f"{doctype}\n" if doctype.startswith("<!") else f"<!DOCTYPE {doctype}>\n"
	for _ in nodes:
		if isinstance(_, Node):
			yield from _.iterHTML()
		else:
			yield escape(_)


# EOF

from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Protocol, TypeAlias

from .utils.htmpl import Node, html

# --
# == Templates
#
# A template handle renders data to a byte sink, either through its default
# entry point or through one of its named entry points.


class Writable(Protocol):
	def write(self, data: bytes) -> int: ...


class TemplateError(Exception):
	"""Raised when a template can't be executed."""

	def __init__(self, message: str, name: str | None = None):
		super().__init__(message)
		self.message: str = message
		self.name: str | None = name


class TemplateNotFound(TemplateError):
	"""Raised when executing a named entry point that does not exist."""


class Template(ABC):
	@abstractmethod
	def execute(self, out: Writable, data: Any) -> None:
		"""Executes the default entry point with the given data."""

	@abstractmethod
	def executeTemplate(self, out: Writable, name: str, data: Any) -> None:
		"""Executes the entry point with the given name."""


TTemplateOutput: TypeAlias = Node | str | Iterable[Node | str]
TEntryPoint: TypeAlias = Callable[[Any], TTemplateOutput]


class HTMPLTemplate(Template):
	"""A template built from functions returning HTMPL nodes, like:

	```
	page = HTMPLTemplate(lambda data: H.h1(data["title"]), doctype="html")

	@page.define("item")
	def item(data):
		return H.li(data)
	```
	"""

	__slots__ = ["entry", "templates", "doctype", "encoding"]

	def __init__(
		self,
		entry: TEntryPoint | None = None,
		*,
		doctype: str | None = None,
		encoding: str = "utf8",
		**templates: TEntryPoint,
	):
		self.entry: TEntryPoint | None = entry
		self.templates: dict[str, TEntryPoint] = templates
		self.doctype: str | None = doctype
		self.encoding: str = encoding

	def define(self, name: str) -> Callable[[TEntryPoint], TEntryPoint]:
		"""Decorator registering a named entry point."""

		def decorator(entry: TEntryPoint) -> TEntryPoint:
			self.templates[name] = entry
			return entry

		return decorator

	def lookup(self, name: str) -> TEntryPoint | None:
		return self.templates.get(name)

	def execute(self, out: Writable, data: Any) -> None:
		if self.entry is None:
			raise TemplateNotFound("Template has no default entry point")
		self.render(out, self.entry, data, doctype=self.doctype)

	def executeTemplate(self, out: Writable, name: str, data: Any) -> None:
		entry = self.lookup(name)
		if entry is None:
			raise TemplateNotFound(f"No template named '{name}'", name)
		self.render(out, entry, data, name=name)

	def render(
		self,
		out: Writable,
		entry: TEntryPoint,
		data: Any,
		*,
		name: str | None = None,
		doctype: str | None = None,
	) -> None:
		# The entry point runs before anything is written, so that data
		# errors don't produce partial output.
		try:
			res = entry(data)
			nodes: list[Node | str] = (
				[res] if isinstance(res, (Node, str)) else list(res)
			)
			payload: str = "".join(html(*nodes, doctype=doctype))
		except TemplateError:
			raise
		except Exception as e:
			raise TemplateError(
				f"Template{f' {name}' if name else ''} failed: {e}", name
			) from e
		out.write(payload.encode(self.encoding))


# EOF

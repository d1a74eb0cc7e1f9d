import csv
import io
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

from . import config
from .http.api import WebContext
from .http.files import serveFile
from .http.redirect import redirect
from .template import Template, TemplateError
from .utils.codec import TextEncoder
from .utils.json import json
from .utils.logging import error

# --
# == Results
#
# Handlers return a `Result` instead of writing to the response, the result
# then writes itself (status, headers, body) through `do`. Results are
# frozen: defaults like the status code are resolved when rendering, so
# that rendering twice writes the same thing.

# -----------------------------------------------------------------------------
#
# RESULT
#
# -----------------------------------------------------------------------------


class Result(ABC):
	"""A value that knows how to write itself as an HTTP response."""

	__slots__ = ()

	@abstractmethod
	def do(self, context: WebContext) -> None:
		"""Writes the response to the context's writer, raising the first
		error encountered."""


def render(result: Result, context: WebContext) -> None:
	"""Renders the result in the given context, logging any failure before
	raising it again. When the writer is already committed, the response
	can't be rolled back and is likely partial."""
	try:
		result.do(context)
	except Exception as e:
		writer = context.writer
		error(
			f"{result.__class__.__name__} failed to render: {e}",
			writer.status,
			Path=context.request.path,
			Committed=writer.committed,
			Written=writer.written,
		)
		raise


# -----------------------------------------------------------------------------
#
# VARIANTS
#
# -----------------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class ResultHead(Result):
	"""Writes a status with no body."""

	code: int = 0

	def do(self, context: WebContext) -> None:
		context.writer.writeHeader(self.code or 200)


@dataclass(slots=True, frozen=True)
class ResultText(Result):
	"""Writes plain text."""

	text: str = ""
	code: int = 0

	def do(self, context: WebContext) -> None:
		w = context.writer
		w.setHeader("Content-Type", "text/plain; charset=utf-8")
		w.writeHeader(self.code or 200)
		w.write(self.text.encode("utf8"))


@dataclass(slots=True, frozen=True)
class ResultHTML(Result):
	"""Writes HTML, taken from the first available source: the literal
	`text`, the template entry point `name`, or the template's default entry
	point. Template paths don't set a status, so the writer's default `200`
	applies."""

	text: str = ""
	name: str = ""
	template: Template | None = None
	data: Any = None

	def do(self, context: WebContext) -> None:
		w = context.writer
		w.setHeader("Content-Type", "text/html; charset=utf-8")
		if self.text:
			w.write(self.text.encode("utf8"))
		elif self.template is None:
			raise TemplateError("HTML result has neither text nor template", self.name)
		elif self.name:
			self.template.executeTemplate(w, self.name, self.data)
		else:
			self.template.execute(w, self.data)


@dataclass(slots=True, frozen=True)
class ResultJSON(Result):
	"""Writes the data encoded as JSON. The data is encoded before anything is
	written, so that an encoding failure leaves the response untouched."""

	data: Any = None
	code: int = 0

	def do(self, context: WebContext) -> None:
		payload: bytes = json(self.data)
		w = context.writer
		w.setHeader("Content-Type", "application/json")
		w.writeHeader(self.code or 200)
		w.write(payload)


@dataclass(slots=True, frozen=True)
class ResultCSV(Result):
	"""Writes rows as CSV, encoded in a legacy encoding (`cp932` Shift-JIS unless
	configured otherwise). Rows are written one by one, the first row that
	fails to encode aborts the remaining ones."""

	data: Sequence[Sequence[str]] = ()
	attachment: bool = False
	code: int = 0
	encoding: str | None = None
	errors: str | None = None

	def do(self, context: WebContext) -> None:
		encoder = TextEncoder(self.encoding, self.errors)
		w = context.writer
		w.setHeader("Content-Type", config.CSV_CONTENT_TYPE)
		if self.attachment:
			w.setHeader("Content-Disposition", "attachment")
		w.writeHeader(self.code or 200)
		buffer = io.StringIO()
		rows = csv.writer(buffer, lineterminator="\n")
		for row in self.data:
			rows.writerow(row)
			w.write(encoder.feed(buffer.getvalue()))
			buffer.seek(0)
			buffer.truncate()
		if tail := encoder.flush():
			w.write(tail)


@dataclass(slots=True, frozen=True)
class ResultFile(Result):
	"""Serves the file at the given path. A missing path raises before
	anything is written, otherwise the status is managed by the file
	transfer (ranges, conditional requests)."""

	path: str | Path

	def do(self, context: WebContext) -> None:
		os.stat(self.path)
		serveFile(context.writer, context.request, self.path)


@dataclass(slots=True, frozen=True)
class ResultData(Result):
	"""Writes raw bytes, with the given content type if any."""

	data: bytes = b""
	contentType: str = ""

	def do(self, context: WebContext) -> None:
		w = context.writer
		if self.contentType:
			w.setHeader("Content-Type", self.contentType)
		w.write(self.data)


@dataclass(slots=True, frozen=True)
class ResultRedirect(Result):
	"""Redirects to the given URL, with `303 See Other` by default."""

	url: str
	code: int = 0

	def do(self, context: WebContext) -> None:
		redirect(context.writer, context.request, self.url, self.code or 303)


# EOF

import codecs
from abc import ABC, abstractmethod
from .. import config


class TextTransform(ABC):
	"""An abstract transform from text to bytes."""

	@abstractmethod
	def feed(self, text: str) -> bytes:
		"""Encodes the given text, raising on characters that can't be
		represented (depending on the error policy)."""

	@abstractmethod
	def flush(self) -> bytes:
		"""Returns any bytes held back by a stateful encoding."""


class TextEncoder(TextTransform):
	"""Encodes text to the given target encoding, so that the encoding
	is a configuration value rather than a hard dependency.

	With the default `strict` policy, characters outside of the target
	character set raise `UnicodeEncodeError`, with `replace` they are
	substituted."""

	__slots__ = ["encoding", "errors", "encoder"]

	def __init__(self, encoding: str | None = None, errors: str | None = None):
		self.encoding: str = codecs.lookup(encoding or config.CSV_ENCODING).name
		self.errors: str = errors or config.CSV_ERRORS
		self.encoder = codecs.getincrementalencoder(self.encoding)(self.errors)

	def feed(self, text: str) -> bytes:
		return self.encoder.encode(text)

	def flush(self) -> bytes:
		return self.encoder.encode("", True)

	def __str__(self) -> str:
		return f"TextEncoder({self.encoding}, errors={self.errors})"


# EOF

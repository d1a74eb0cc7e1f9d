from typing import Any
from base64 import b64encode
from decimal import Decimal
from datetime import date, datetime
from dataclasses import is_dataclass, fields
from pathlib import Path
from enum import Enum


TLiteral = bool | int | float | str | bytes
TComposite = (
	list[TLiteral] | dict[TLiteral, TLiteral] | set[TLiteral] | tuple[TLiteral, ...]
)
TComposite2 = (
	list[TLiteral | TComposite]
	| dict[TLiteral, TLiteral | TComposite]
	| set[TLiteral | TComposite]
	| tuple[TLiteral | TComposite, ...]
)
TPrimitive = bool | int | float | str | bytes | TComposite | TComposite2


def asPrimitive(value: Any) -> Any:
	"""Converts the given value to a primitive value that can be encoded
	as JSON. Values that have no primitive counterpart are returned as-is,
	so that the encoder can reject them."""
	if value is None or type(value) in (bool, float, int, str):
		return value
	elif isinstance(value, tuple) and hasattr(value, "_fields"):
		f = getattr(type(value), "asPrimitive", None)
		return (
			f(value)
			if f
			else {k: asPrimitive(getattr(value, k)) for k in value._fields}
		)
	elif isinstance(value, (list, tuple, set, frozenset)):
		return [asPrimitive(v) for v in value]
	elif is_dataclass(value) and not isinstance(value, type):
		return {_.name: asPrimitive(getattr(value, _.name)) for _ in fields(value)}
	elif isinstance(value, Enum):
		return asPrimitive(value.value)
	elif isinstance(value, dict):
		# String keys are sorted, other keys keep their insertion order
		items = (
			sorted(value.items())
			if all(isinstance(k, str) for k in value)
			else value.items()
		)
		return {asPrimitive(k): asPrimitive(v) for k, v in items}
	elif isinstance(value, (bytes, bytearray)):
		# Binary payloads are transported as base64 strings
		return b64encode(value).decode("ascii")
	elif isinstance(value, Decimal):
		return str(value)
	elif isinstance(value, Path):
		return str(value)
	elif isinstance(value, datetime) or isinstance(value, date):
		return value.isoformat()
	else:
		return value


# EOF

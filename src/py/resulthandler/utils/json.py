from typing import Any, TypeAlias, cast
import json as basejson
from .primitives import asPrimitive


TJSON: TypeAlias = None | int | float | bool | str | list[Any] | dict[str, Any]


def json(value: Any) -> bytes:
	"""Encodes the given value as compact JSON bytes. Raises `TypeError` for
	values that can't be represented and `ValueError` for non-finite
	floats."""
	return basejson.dumps(
		asPrimitive(value),
		separators=(",", ":"),
		ensure_ascii=False,
		allow_nan=False,
	).encode("utf8")


def unjson(value: bytes | str) -> TJSON:
	"""Decodes JSON-encoded bytes or string."""
	return cast(TJSON, basejson.loads(value))


# EOF

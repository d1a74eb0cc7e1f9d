import mimetypes
from pathlib import Path

mimetypes.init()

MIME_TYPES: dict[str, str] = dict(
	bz2="application/x-bzip",
	gz="application/x-gzip",
	csv="text/csv; charset=utf-8",
	html="text/html; charset=utf-8",
	htm="text/html; charset=utf-8",
	css="text/css; charset=utf-8",
	js="text/javascript; charset=utf-8",
	mjs="text/javascript; charset=utf-8",
	txt="text/plain; charset=utf-8",
	md="text/markdown; charset=utf-8",
	json="application/json",
	svg="image/svg+xml",
	wasm="application/wasm",
)


SNIFF_SIZE: int = 512


def isTextData(data: bytes) -> bool:
	"""Tells if the given sample looks like UTF-8 text."""
	if b"\x00" in data:
		return False
	try:
		data.decode("utf-8")
		return True
	except UnicodeDecodeError as e:
		# The sample may end in the middle of a multi-byte sequence
		return e.start >= len(data) - 3 and e.reason == "unexpected end of data"


def sniff(data: bytes) -> str:
	"""Guesses the content type of the given payload from its first bytes."""
	sample = data[:SNIFF_SIZE]
	head = sample.lstrip().lower()
	if head.startswith(b"<!doctype html") or head.startswith(b"<html"):
		return "text/html; charset=utf-8"
	elif head.startswith(b"%pdf-"):
		return "application/pdf"
	elif sample.startswith(b"\x89PNG\r\n\x1a\n"):
		return "image/png"
	elif sample.startswith(b"\xff\xd8\xff"):
		return "image/jpeg"
	elif sample.startswith(b"GIF87a") or sample.startswith(b"GIF89a"):
		return "image/gif"
	elif isTextData(sample):
		return "text/plain; charset=utf-8"
	else:
		return "application/octet-stream"


def guessContentType(path: Path | str) -> str | None:
	"""Guesses the content type from the extension of the given path, returning
	`None` when the extension is unknown."""
	name: str = Path(path).name
	ext: str = name.rsplit(".", 1)[-1].lower() if "." in name else ""
	return MIME_TYPES.get(ext) or mimetypes.guess_type(name)[0]


def contentType(path: Path | str) -> str:
	"""Guesses the content type from the given path, sniffing the content
	when the extension is not enough."""
	if res := guessContentType(path):
		return res
	else:
		with open(path, "rb") as f:
			return sniff(f.read(SNIFF_SIZE))


# EOF

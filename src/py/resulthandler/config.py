from os import getenv

# Legacy encoding used for CSV bodies, any codec name known to Python works.
# `cp932` (Windows-31J) is the Shift-JIS flavour that covers the vendor
# characters (㈱, ①, 髙, ～) plain `shift_jis` rejects.
CSV_ENCODING: str = getenv("RESULTHANDLER_CSV_ENCODING", "cp932")

# Codec error policy: `strict` fails on characters the encoding can't
# represent, `replace` substitutes them with `?`.
CSV_ERRORS: str = getenv("RESULTHANDLER_CSV_ERRORS", "strict")

# NOTE: The `char=` parameter is kept as-is for existing consumers, set
# `text/csv; charset=windows-31j` to advertise the actual body encoding.
CSV_CONTENT_TYPE: str = getenv("RESULTHANDLER_CSV_CONTENT_TYPE", "text/csv; char=utf-8")

FILE_CHUNK_SIZE: int = int(getenv("RESULTHANDLER_FILE_CHUNK_SIZE", 64_000))

LOG_LEVEL: str = getenv("RESULTHANDLER_LOG_LEVEL", "Info")

# EOF

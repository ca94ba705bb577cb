import mimetypes
from pathlib import Path
from typing import BinaryIO

mimetypes.init()

MIME_TYPES: dict[str, str] = dict(
	bz2="application/x-bzip",
	gz="application/x-gzip",
	md="text/markdown",
	mjs="text/javascript",
	wasm="application/wasm",
	webmanifest="application/manifest+json",
)

# Number of bytes looked at when sniffing a content type
SNIFF_SIZE: int = 512


def isText(data: bytes) -> bool:
	"""Tells if the given sample is likely to come from a text file."""
	if b"\x00" in data:
		return False
	try:
		data.decode("utf-8")
		return True
	except UnicodeDecodeError as e:
		# The sample may end in the middle of a multi-byte sequence
		return e.start >= len(data) - 3 and e.reason == "unexpected end of data"


def sniff(file: BinaryIO, size: int = SNIFF_SIZE) -> str:
	"""Guesses the content type from the first bytes of the file, leaving the
	file position unchanged."""
	position = file.tell()
	try:
		data = file.read(size)
	finally:
		file.seek(position)
	if data.lstrip()[:14].lower().startswith((b"<!doctype html", b"<html")):
		return "text/html; charset=utf-8"
	elif isText(data):
		return "text/plain; charset=utf-8"
	else:
		return "application/octet-stream"


def contentType(path: Path | str, file: BinaryIO | None = None) -> str:
	"""Guesses the content type from the given path, falling back to sniffing
	the file content when the extension is unknown."""
	name = str(path)
	if res := MIME_TYPES.get(name.rsplit(".", 1)[-1].lower()):
		return res
	elif res := mimetypes.guess_type(name)[0]:
		return f"{res}; charset=utf-8" if res.startswith("text/") else res
	elif file is not None:
		return sniff(file)
	else:
		return "application/octet-stream"


# EOF

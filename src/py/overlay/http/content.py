from email.utils import formatdate, parsedate_to_datetime
from typing import Literal

__doc__ = """
Helpers for serving file content: HTTP dates for `Last-Modified` and
`If-Modified-Since`, and parsing of single `Range: bytes=…` requests.
"""


def httpdate(timestamp: float) -> str:
	"""Formats the given timestamp as an HTTP date."""
	return formatdate(int(timestamp), usegmt=True)


def parseHTTPDate(value: str | None) -> float | None:
	"""Parses an HTTP date as a timestamp, returning `None` when the value is
	missing or malformed."""
	if not value:
		return None
	try:
		return parsedate_to_datetime(value).timestamp()
	except (TypeError, ValueError, IndexError, OverflowError):
		return None


def isNotModified(modified: float, ifModifiedSince: str | None) -> bool:
	"""Tells if a resource last modified at `modified` can be answered with a
	304 given the `If-Modified-Since` header value."""
	since = parseHTTPDate(ifModifiedSince)
	# HTTP dates have a one second resolution
	return since is not None and int(modified) <= since


def parseRange(value: str | None, size: int) -> tuple[int, int] | None | Literal[False]:
	"""Parses a `Range` header value for a resource of `size` bytes, returning
	`(offset, length)` for a satisfiable single range, `None` when the whole
	content should be sent, and `False` when the range cannot be satisfied."""
	if not value:
		return None
	unit, _, spec = value.partition("=")
	if unit.strip().lower() != "bytes" or not spec.strip():
		return False
	ranges = [_.strip() for _ in spec.split(",") if _.strip()]
	if len(ranges) != 1:
		# Multipart byte ranges are not supported, the whole content is sent
		return None if ranges else False
	start_str, sep, end_str = ranges[0].partition("-")
	start_str, end_str = start_str.strip(), end_str.strip()
	if not sep or not (start_str.isdigit() or start_str == ""):
		return False
	if end_str and not end_str.isdigit():
		return False
	if not start_str:
		# A suffix range, for the last N bytes
		if not end_str:
			return False
		suffix = int(end_str)
		if suffix == 0 or size == 0:
			return False
		suffix = min(suffix, size)
		return size - suffix, suffix
	start = int(start_str)
	if start >= size:
		return False
	end = min(int(end_str), size - 1) if end_str else size - 1
	if end < start:
		return False
	return start, end - start + 1


# EOF

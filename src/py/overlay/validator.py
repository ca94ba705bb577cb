import re
from typing import Pattern

RE_SEPARATOR: Pattern[str] = re.compile(r"[/\\]")


def validate(path: str) -> bool:
	"""Tells if the request path is safe to resolve against a root, which is
	the case unless one of its `/` or `\\` separated fields is exactly `..`.
	Fields merely containing dots (`a..b`, `...`) are valid, and no other
	normalization happens."""
	if ".." not in path:
		return True
	return not any(_ == ".." for _ in RE_SEPARATOR.split(path))


# EOF

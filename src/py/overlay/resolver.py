import os
import stat as statmode
from typing import BinaryIO, Iterable, NamedTuple, TypeAlias

from .utils.logging import warning

__doc__ = """
Resolves a request path against an ordered set of root directories, as if
the roots were layered on top of each other. Files resolve to the first root
that has them (trying `index.html` right after the path itself, for each
root), while directories resolve to the listings of every root that has
them. The outcome of a resolution is one of `ServedFile`, `ServedFallback`,
`RenderedListing` or `NotFound`.

Filesystem errors for a given root are never reported: the root simply does
not contribute to the result.
"""

INDEX: str = "index.html"

# -----------------------------------------------------------------------------
#
# DATA MODEL
#
# -----------------------------------------------------------------------------


class Entry(NamedTuple):
	"""An entry of a directory listing."""

	name: str
	isDirectory: bool


PARENT_ENTRY: Entry = Entry("..", True)


class DirectoryListing(NamedTuple):
	"""The entries found at `requestPath` in the `localPath` root, always
	starting with the parent entry and otherwise in filesystem order."""

	localPath: str
	requestPath: str
	entries: tuple[Entry, ...]


class ServedFile(NamedTuple):
	"""A regular file found in `root`, opened and ready to be served. The
	outcome owns the file, which must be closed."""

	path: str
	root: str
	file: BinaryIO
	stat: os.stat_result

	def close(self) -> None:
		self.file.close()


class ServedFallback(NamedTuple):
	"""The fallback resource, opened and ready to be served."""

	path: str
	file: BinaryIO
	stat: os.stat_result

	def close(self) -> None:
		self.file.close()


class RenderedListing(NamedTuple):
	"""The listings of all the roots that have a directory at the request
	path, in root order."""

	listings: tuple[DirectoryListing, ...]


class NotFound(NamedTuple):
	"""Nothing matches the request path."""


Resolution: TypeAlias = ServedFile | ServedFallback | RenderedListing | NotFound

# -----------------------------------------------------------------------------
#
# FILESYSTEM
#
# -----------------------------------------------------------------------------


def localPath(root: str, path: str) -> str:
	"""Returns the local path for the request `path` in the given `root`.
	The path is expected to have been validated."""
	return os.path.normpath(os.path.join(root, path.lstrip("/")))


def tryFile(path: str) -> tuple[BinaryIO, os.stat_result] | None:
	"""Opens the regular file at the given path, returning the open file
	and its stat, or `None` if there is no such file or it can't be opened."""
	try:
		if not statmode.S_ISREG(os.stat(path).st_mode):
			return None
		file: BinaryIO = open(path, "rb")
	except (OSError, ValueError):
		# NOTE: `ValueError` is raised for paths with NUL bytes
		return None
	try:
		info = os.fstat(file.fileno())
	except OSError:
		file.close()
		return None
	# The path may have been replaced between the stat and the open
	if not statmode.S_ISREG(info.st_mode):
		file.close()
		return None
	return file, info


def tryFiles(roots: Iterable[str], path: str) -> ServedFile | None:
	"""Looks for the file at `path` and then `path/index.html` in each root,
	returning the first match."""
	for root in roots:
		file_path = localPath(root, path)
		for candidate in (file_path, os.path.join(file_path, INDEX)):
			if found := tryFile(candidate):
				return ServedFile(candidate, root, *found)
	return None


def tryFallback(path: str) -> ServedFallback | None:
	if not path:
		return None
	if found := tryFile(path):
		return ServedFallback(path, *found)
	warning("Fallback resource can't be served", Path=path)
	return None


def isDirectory(entry: os.DirEntry[str]) -> bool:
	try:
		return entry.is_dir()
	except OSError:
		return False


def listDirectory(root: str, path: str) -> DirectoryListing | None:
	"""Lists the directory at the request `path` in the given root, returning
	`None` when it can't be enumerated."""
	entries: list[Entry] = [PARENT_ENTRY]
	try:
		with os.scandir(localPath(root, path)) as items:
			for _ in items:
				entries.append(Entry(_.name, isDirectory(_)))
	except (OSError, ValueError):
		return None
	return DirectoryListing(root, path, tuple(entries))


def tryDirs(roots: Iterable[str], path: str) -> list[DirectoryListing]:
	"""Returns the listings of every root that has a directory at `path`."""
	return [_ for _ in (listDirectory(root, path) for root in roots) if _]


# -----------------------------------------------------------------------------
#
# RESOLUTION
#
# -----------------------------------------------------------------------------


def resolve(
	roots: Iterable[str],
	path: str,
	acceptsMarkup: bool,
	listing: bool = True,
	fallback: str | None = None,
) -> Resolution:
	"""Resolves the request `path` against the roots, in order: a file (or
	its `index.html`), then, only when the client accepts HTML, the
	fallback resource, then the merged directory listings."""
	roots = tuple(roots)
	if served := tryFiles(roots, path):
		return served
	if not acceptsMarkup:
		return NotFound()
	if fallback and (served_fallback := tryFallback(fallback)):
		return served_fallback
	if listing and (listings := tryDirs(roots, path)):
		return RenderedListing(tuple(listings))
	return NotFound()


# EOF

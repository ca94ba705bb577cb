import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, BinaryIO, Generic, TypeVar

from ..utils.files import contentType as getContentType
from .content import httpdate, isNotModified, parseRange
from .status import HTTP_STATUS

T = TypeVar("T")

# -----------------------------------------------------------------------------
#
# API
#
# -----------------------------------------------------------------------------

# --
# == HTTP Request Response API
#
# Defines the high level API functions (orthogonal to the underlying model)
# to create responses from a request.


class ResponseFactory(ABC, Generic[T]):
	@abstractmethod
	def respond(
		self,
		content: Any = None,
		contentType: str | None = None,
		contentLength: int | None = None,
		status: int = 200,
		headers: dict[str, str] | None = None,
		message: str | None = None,
	) -> T: ...

	@abstractmethod
	def header(self, name: str) -> str | None: ...

	def error(
		self,
		status: int,
		content: str | None = None,
		contentType: str = "text/plain; charset=utf-8",
		headers: dict[str, str] | None = None,
	) -> T:
		message = HTTP_STATUS.get(status, "Server Error")
		return self.respond(
			content=message if content is None else content,
			contentType=contentType,
			status=status,
			message=message,
			headers=headers,
		)

	def badRequest(self, content: str = "Bad Request") -> T:
		return self.error(400, content=content)

	def notFound(self, content: str = "Not Found") -> T:
		return self.error(404, content=content)

	def notAllowed(self, allowed: str = "GET, HEAD") -> T:
		return self.error(405, headers={"Allow": allowed})

	def fail(self, content: str | None = None, *, status: int = 500) -> T:
		return self.error(status, content=content)

	def respondContent(
		self,
		path: Path | str,
		file: BinaryIO,
		stat: os.stat_result,
		*,
		contentType: str | None = None,
		headers: dict[str, str] | None = None,
	) -> T:
		"""Responds with the content of the given open `file`, handling
		`If-Modified-Since` (304) and single byte ranges (206/416). The
		response takes ownership of the file."""
		try:
			return self._respondContent(
				path if isinstance(path, Path) else Path(path),
				file,
				stat,
				contentType=contentType,
				headers=headers,
			)
		except BaseException:
			file.close()
			raise

	def _respondContent(
		self,
		p: Path,
		file: BinaryIO,
		stat: os.stat_result,
		*,
		contentType: str | None = None,
		headers: dict[str, str] | None = None,
	) -> T:
		# NOTE: Importing here, as the model depends on this module
		from .model import HTTPBodyFile

		size: int = stat.st_size
		base_headers: dict[str, str] = {
			"Last-Modified": httpdate(stat.st_mtime),
			"Accept-Ranges": "bytes",
		} | (headers or {})
		if isNotModified(stat.st_mtime, self.header("If-Modified-Since")):
			file.close()
			return self.respond(status=304, headers=base_headers)
		content_type: str = contentType or getContentType(p, file)
		requested = self.header("Range")
		# A range only applies when `If-Range` matches the current version
		if_range = self.header("If-Range")
		if if_range and if_range != base_headers["Last-Modified"]:
			requested = None
		match parseRange(requested, size):
			case False:
				file.close()
				return self.error(
					416,
					headers=base_headers | {"Content-Range": f"bytes */{size}"},
				)
			case (offset, length):
				return self.respond(
					content=HTTPBodyFile(p, file, offset, length),
					contentType=content_type,
					status=206,
					headers=base_headers
					| {"Content-Range": f"bytes {offset}-{offset + length - 1}/{size}"},
				)
			case _:
				return self.respond(
					content=HTTPBodyFile(p, file, 0, size),
					contentType=content_type,
					headers=base_headers,
				)


# EOF

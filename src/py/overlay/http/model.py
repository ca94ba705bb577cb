from abc import ABC, abstractmethod
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, BinaryIO, Literal, NamedTuple, TypeAlias, Union

from ..utils.io import DEFAULT_ENCODING
from .api import ResponseFactory
from .status import HTTP_STATUS

# -----------------------------------------------------------------------------
#
# HEADERS
#
# -----------------------------------------------------------------------------


@lru_cache(maxsize=1024)
def headername(name: str) -> str:
	"""Normalizes the header name as `Kebab-Case`, so that `accept`,
	`ACCEPT` and `Accept` all designate the same header."""
	return "-".join(_.capitalize() for _ in name.lower().split("-"))


class HTTPHeaders(NamedTuple):
	"""The headers of a message, indexed by normalized name, along with the
	values that drive the processing of the message."""

	headers: dict[str, str]
	contentType: str | None = None
	contentLength: int | None = None


# -----------------------------------------------------------------------------
#
# PARSING
#
# -----------------------------------------------------------------------------


class HTTPRequestLine(NamedTuple):
	method: str
	path: str
	query: str
	protocol: str


class HTTPProcessingStatus(Enum):
	"""The states of a connection that are not a parsed value."""

	Processing = 0
	Body = 1
	Timeout = 10
	NoData = 11
	BadFormat = 12
	HeadersTooLarge = 13
	BodyTooLarge = 14


# What the parser yields as it goes through a request
HTTPAtom: TypeAlias = Union[
	HTTPRequestLine,
	HTTPHeaders,
	HTTPProcessingStatus,
	"HTTPRequest",
]

# -----------------------------------------------------------------------------
#
# ERRORS
#
# -----------------------------------------------------------------------------


class HTTPRequestError(Exception):
	"""Raised by handlers to respond with an error, a 500 unless `status` is
	given."""

	def __init__(
		self,
		message: str,
		status: int | None = None,
		contentType: str | None = None,
	):
		super().__init__(message)
		self.message: str = message
		self.status: int | None = status
		self.contentType: str | None = contentType


# -----------------------------------------------------------------------------
#
# BODIES
#
# -----------------------------------------------------------------------------


class HTTPBodyBlob(NamedTuple):
	"""A body held in memory."""

	payload: bytes = b""

	@property
	def length(self) -> int:
		return len(self.payload)

	@property
	def raw(self) -> bytes:
		return self.payload


class HTTPBodyFile(NamedTuple):
	"""A body read from an open file, restricted to `length` bytes starting
	at `offset` (up to the end of the file when `length` is `None`). The body
	owns the file, which is closed once written or released."""

	path: Path
	file: BinaryIO
	offset: int = 0
	length: int | None = None

	def close(self) -> None:
		self.file.close()

	def readall(self) -> bytes:
		"""Reads the whole body and closes the file."""
		try:
			self.file.seek(self.offset)
			return self.file.read(-1 if self.length is None else self.length)
		finally:
			self.close()


THTTPBody: TypeAlias = HTTPBodyBlob | HTTPBodyFile


class HTTPBodyWriter(ABC):
	"""Writes response heads and bodies to a destination, as implemented by
	`_writeBytes`."""

	__slots__ = ["shouldClose"]

	def __init__(self) -> None:
		self.shouldClose: bool = False

	async def write(self, body: THTTPBody | bytes | None) -> bool:
		match body:
			case None:
				return True
			case bytes():
				return await self._writeBytes(body)
			case HTTPBodyBlob(payload=payload):
				return await self._writeBytes(payload)
			case HTTPBodyFile():
				try:
					return await self._writeFile(body)
				finally:
					body.close()
			case _:
				raise ValueError(f"Unsupported body format: {body!r}")

	async def _writeFile(self, body: HTTPBodyFile, size: int = 64_000) -> bool:
		"""Sends the file by chunks of at most `size` bytes."""
		body.file.seek(body.offset)
		left: int | None = body.length
		while left is None or left > 0:
			chunk = body.file.read(size if left is None else min(size, left))
			if not chunk:
				break
			if left is not None:
				left -= len(chunk)
			await self._writeBytes(chunk, True)
		return True

	@abstractmethod
	async def _writeBytes(
		self, chunk: bytes | None | Literal[False], more: bool = False
	) -> bool: ...


# -----------------------------------------------------------------------------
#
# REQUESTS
#
# -----------------------------------------------------------------------------


class HTTPRequest(ResponseFactory["HTTPResponse"]):
	"""A parsed HTTP request, which is also the factory of its responses.
	The `path` is percent-decoded but otherwise left as sent."""

	__slots__ = ["method", "path", "query", "protocol", "peer", "_headers", "_body"]

	def __init__(
		self,
		method: str,
		path: str,
		query: dict[str, str] | None,
		headers: HTTPHeaders,
		body: HTTPBodyBlob | None = None,
		protocol: str = "HTTP/1.1",
		peer: str | None = None,
	):
		super().__init__()
		self.method: str = method
		self.path: str = path
		self.query: dict[str, str] | None = query
		self.protocol: str = protocol
		# The client address, set by the server
		self.peer: str | None = peer
		self._headers: HTTPHeaders = headers
		self._body: HTTPBodyBlob | None = body

	@staticmethod
	def Create(
		method: str = "GET",
		path: str = "/",
		headers: dict[str, str] | None = None,
		*,
		query: dict[str, str] | None = None,
		protocol: str = "HTTP/1.1",
	) -> "HTTPRequest":
		"""Creates a request directly, as when processing a request outside of
		a server."""
		return HTTPRequest(
			method,
			path,
			query,
			HTTPHeaders({headername(k): v for k, v in (headers or {}).items()}),
			protocol=protocol,
		)

	@property
	def headers(self) -> dict[str, str]:
		return self._headers.headers

	def header(self, name: str) -> str | None:
		return self._headers.headers.get(headername(name))

	@property
	def body(self) -> HTTPBodyBlob:
		return self._body or HTTPBodyBlob()

	def respond(
		self,
		content: Any = None,
		contentType: str | None = None,
		contentLength: int | None = None,
		status: int = 200,
		headers: dict[str, str] | None = None,
		message: str | None = None,
	) -> "HTTPResponse":
		return HTTPResponse.Create(
			content,
			contentType=contentType,
			contentLength=contentLength,
			headers=headers,
			status=status,
			message=message,
			protocol=self.protocol,
		)

	def __repr__(self) -> str:
		return f"<HTTPRequest {self.method} {self.path} {self.protocol}>"


# -----------------------------------------------------------------------------
#
# RESPONSES
#
# -----------------------------------------------------------------------------


def asBody(content: Any) -> THTTPBody | None:
	match content:
		case None:
			return None
		case str():
			return HTTPBodyBlob(content.encode(DEFAULT_ENCODING))
		case bytes():
			return HTTPBodyBlob(content)
		case HTTPBodyFile():
			return content
		case _:
			raise ValueError(f"Unsupported content {type(content)}: {content!r}")


class HTTPResponse:
	"""An HTTP response, with a body in memory or read from a file."""

	@staticmethod
	def Create(
		content: Any = None,
		contentType: str | None = None,
		contentLength: int | None = None,
		headers: dict[str, str] | None = None,
		status: int = 200,
		message: str | None = None,
		protocol: str = "HTTP/1.1",
	) -> "HTTPResponse":
		"""Creates a response for the given content, which is either text,
		bytes or an `HTTPBodyFile`, setting its type and length headers."""
		body = asBody(content)
		res_headers: dict[str, str] = {
			headername(k): v for k, v in (headers or {}).items()
		}
		if contentType is not None:
			res_headers["Content-Type"] = contentType
		if isinstance(body, HTTPBodyBlob):
			contentLength = body.length
		elif isinstance(body, HTTPBodyFile) and contentLength is None:
			contentLength = body.length
		if contentLength is None and "Content-Length" in res_headers:
			contentLength = int(res_headers["Content-Length"])
		# Responses without a body still state it, except where it is forbidden
		if contentLength is None and body is None and status not in (204, 304):
			contentLength = 0
		if contentLength is not None:
			res_headers["Content-Length"] = str(contentLength)
		return HTTPResponse(
			protocol=protocol,
			status=status,
			message=message,
			headers=HTTPHeaders(
				res_headers,
				contentType=res_headers.get("Content-Type"),
				contentLength=contentLength,
			),
			body=body,
			# Without a length, the end of the body is the end of the connection
			shouldClose=contentLength is None and body is not None,
		)

	__slots__ = ["protocol", "status", "message", "headers", "body", "shouldClose"]

	def __init__(
		self,
		protocol: str,
		status: int,
		message: str | None,
		headers: HTTPHeaders,
		body: THTTPBody | None = None,
		shouldClose: bool = False,
	):
		self.protocol: str = protocol
		self.status: int = status
		self.message: str = message or HTTP_STATUS.get(status, "Unknown Status")
		self.headers: HTTPHeaders = headers
		self.body: THTTPBody | None = body
		self.shouldClose: bool = shouldClose

	def header(self, name: str) -> str | None:
		return self.headers.headers.get(headername(name))

	def setHeader(self, name: str, value: str | int | None) -> "HTTPResponse":
		"""Sets the header, or removes it when `value` is `None`."""
		if value is None:
			self.headers.headers.pop(headername(name), None)
		else:
			self.headers.headers[headername(name)] = str(value)
		return self

	def head(self) -> bytes:
		"""Serializes the status line and headers, up to the empty line."""
		lines = [f"{self.protocol} {self.status} {self.message}"]
		lines.extend(f"{k}: {v}" for k, v in self.headers.headers.items())
		# Non-ASCII header values are not representable
		return ("\r\n".join(lines) + "\r\n\r\n").encode("ascii", "replace")

	def read(self) -> bytes:
		"""Reads the whole body in memory, releasing any underlying file."""
		match self.body:
			case None:
				return b""
			case HTTPBodyBlob(payload=payload):
				return payload
			case HTTPBodyFile() as body:
				return body.readall()
			case _:
				raise ValueError(f"Unsupported body: {self.body!r}")

	def release(self) -> "HTTPResponse":
		"""Releases the file held by the body, if any. This is safe to call
		more than once."""
		if isinstance(self.body, HTTPBodyFile):
			self.body.close()
		return self

	def __repr__(self) -> str:
		return f"<HTTPResponse {self.protocol} {self.status} {self.message}>"


# EOF

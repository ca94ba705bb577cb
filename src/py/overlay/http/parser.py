from typing import Iterator
from urllib.parse import unquote

from ..utils.io import LineParser
from .model import (
	HTTPAtom,
	HTTPBodyBlob,
	HTTPHeaders,
	HTTPProcessingStatus,
	HTTPRequest,
	HTTPRequestLine,
	headername,
)


# Requests are only read to be answered with files, so they are expected to
# be small. Larger ones are rejected rather than buffered.
MAX_LINE: int = 8_192
MAX_HEADERS: int = 100
MAX_BODY: int = 1_048_576


def parseRequestLine(line: bytes) -> HTTPRequestLine | None:
	"""Parses `METHOD TARGET PROTOCOL`, returning `None` when malformed."""
	parts = line.decode("latin-1").strip().split(" ")
	if len(parts) < 3 or not parts[0] or not parts[-1].startswith("HTTP/"):
		return None
	target, _, query = " ".join(parts[1:-1]).partition("?")
	return HTTPRequestLine(parts[0], target, query, parts[-1])


def parsePath(text: str) -> str:
	"""Extracts the percent-decoded path from the request target, which may
	be in absolute form (`http://host/path`)."""
	if "://" in text:
		authority_path = text.split("://", 1)[1]
		i = authority_path.find("/")
		text = authority_path[i:] if i != -1 else "/"
	return unquote(text) or "/"


def parseQuery(text: str) -> dict[str, str]:
	res: dict[str, str] = {}
	for item in text.split("&") if text else ():
		key, _, value = item.partition("=")
		res[unquote(key)] = unquote(value)
	return res


class HTTPParser:
	"""An incremental HTTP/1.1 request parser. Chunks are fed as they are
	received and the parser yields what it recognizes: the request line, the
	headers, then the complete `HTTPRequest`. More than one request can come
	out of a single chunk (pipelining), and requests can span many chunks.

	Bodies are only delimited with `Content-Length`, they are read so that
	the following request can be parsed. Lines longer than `maxLine`, more
	than `maxHeaders` headers or bodies larger than `maxBody` end the parsing
	with `HeadersTooLarge` or `BodyTooLarge`."""

	def __init__(
		self,
		*,
		maxLine: int = MAX_LINE,
		maxHeaders: int = MAX_HEADERS,
		maxBody: int = MAX_BODY,
	) -> None:
		self.maxLine: int = maxLine
		self.maxHeaders: int = maxHeaders
		self.maxBody: int = maxBody
		self.line: LineParser = LineParser()
		self.requestLine: HTTPRequestLine | None = None
		self.fields: dict[str, str] = {}
		self.requestHeaders: HTTPHeaders | None = None
		self.body: bytearray = bytearray()

	def reset(self) -> "HTTPParser":
		self.line.reset()
		self.requestLine = None
		self.fields = {}
		self.requestHeaders = None
		self.body = bytearray()
		return self

	def feed(self, chunk: bytes) -> Iterator[HTTPAtom]:
		offset: int = 0
		size: int = len(chunk)
		while offset < size:
			if self.requestHeaders is not None:
				# Reading the body
				expected = self.requestHeaders.contentLength or 0
				n = min(size - offset, expected - len(self.body))
				self.body += chunk[offset : offset + n]
				offset += n
				if len(self.body) >= expected:
					yield self.request(HTTPBodyBlob(bytes(self.body)))
				continue
			line, read = self.line.feed(chunk, offset)
			offset += read
			if len(line if line is not None else self.line.pending) > self.maxLine or (
				len(self.fields) > self.maxHeaders
			):
				# The connection is expected to be closed
				self.reset()
				yield HTTPProcessingStatus.HeadersTooLarge
				return
			elif line is None:
				continue
			elif self.requestLine is None:
				# Empty lines before a request are ignored
				if not line:
					continue
				elif requestLine := parseRequestLine(line):
					self.requestLine = requestLine
					yield requestLine
				else:
					self.reset()
					yield HTTPProcessingStatus.BadFormat
			elif line:
				self.addHeader(line)
			else:
				headers = self.headers()
				if (headers.contentLength or 0) > self.maxBody:
					self.reset()
					yield HTTPProcessingStatus.BodyTooLarge
					return
				self.requestHeaders = headers
				yield headers
				if headers.contentLength:
					yield HTTPProcessingStatus.Body
				else:
					yield self.request(HTTPBodyBlob())

	def addHeader(self, line: bytes) -> None:
		name, sep, value = line.decode("latin-1").partition(":")
		# Lines that are not headers are skipped
		if sep:
			self.fields[headername(name.strip())] = value.strip()

	def headers(self) -> HTTPHeaders:
		length = self.fields.get("Content-Length")
		return HTTPHeaders(
			self.fields,
			contentType=self.fields.get("Content-Type"),
			contentLength=int(length) if length and length.isdigit() else None,
		)

	def request(self, body: HTTPBodyBlob) -> HTTPRequest:
		"""Creates the request from what was parsed, and gets ready for the
		next one."""
		line, headers = self.requestLine, self.requestHeaders
		self.reset()
		if line is None:
			raise RuntimeError("Request line was not parsed")
		return HTTPRequest(
			method=line.method,
			path=parsePath(line.path),
			query=parseQuery(line.query),
			headers=headers or HTTPHeaders({}),
			body=body,
			protocol=line.protocol,
		)


# EOF

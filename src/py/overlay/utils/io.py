DEFAULT_ENCODING: str = "utf8"
EOL: bytes = b"\r\n"


class LineParser:
	"""Extracts CRLF terminated lines from a stream, however it is split into
	chunks."""

	__slots__ = ["pending", "line"]

	def __init__(self) -> None:
		self.pending: bytearray = bytearray()
		self.line: bytes | None = None

	def reset(self) -> "LineParser":
		self.pending.clear()
		self.line = None
		return self

	def flush(self) -> bytes | None:
		return self.line

	def feed(self, chunk: bytes, start: int = 0) -> tuple[bytes | None, int]:
		"""Consumes `chunk` from `start` up to the first end of line, returning
		the completed line (without its end of line) and the number of bytes
		consumed. The line is `None` when the rest of the chunk was consumed
		without completing a line."""
		if self.pending.endswith(b"\r") and chunk[start : start + 1] == b"\n":
			# The end of line was split between two chunks
			line = bytes(self.pending[:-1])
			read = 1
		elif (end := chunk.find(EOL, start)) == -1:
			self.pending += chunk[start:]
			return None, len(chunk) - start
		else:
			line = bytes(self.pending) + chunk[start:end]
			read = end - start + len(EOL)
		self.pending.clear()
		self.line = line
		return line, read


# EOF

from os import getenv
from typing import Iterable, NamedTuple

VERSION: str = "1.0.0"

PORT: int = int(getenv("PORT", 8080))

HOST: str = getenv("HOST", "localhost")

LOG_REQUESTS: bool = getenv("OVERLAY_LOG_REQUESTS", "1") == "1"


class OverlayConfig(NamedTuple):
	"""The configuration of an overlay server, created once at startup and
	passed explicitly to the services that need it."""

	# Directories in decreasing priority, never empty
	roots: tuple[str, ...] = (".",)
	# Resource served for unmatched requests accepting HTML, empty to disable
	fallback: str = ""
	listing: bool = True
	host: str = HOST
	port: int = PORT
	verbose: bool = False

	@staticmethod
	def Make(
		roots: Iterable[str] | None = None,
		*,
		fallback: str | None = None,
		listing: bool = True,
		host: str = HOST,
		port: int = PORT,
		verbose: bool = False,
	) -> "OverlayConfig":
		return OverlayConfig(
			roots=tuple(roots or ()) or (".",),
			fallback=fallback or "",
			listing=listing,
			host=host,
			port=port,
			verbose=verbose,
		)


# EOF

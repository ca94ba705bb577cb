import argparse
import os
import sys

from .config import HOST, PORT, VERSION, OverlayConfig
from .server import run
from .services.overlay import OverlayService
from .utils.logging import LogLevel, info, setLevel, warning

USAGE: str = "%(prog)s [OPTION]... [DIR]..."


def parser() -> argparse.ArgumentParser:
	res = argparse.ArgumentParser(
		prog="overlay",
		usage=USAGE,
		description="HTTP server for files spanning multiple directories. The "
		"directories are overlaid, the first one having a file taking precedence.",
	)
	res.add_argument(
		"dirs", metavar="DIR", nargs="*", help="directories to serve (default: .)"
	)
	res.add_argument(
		"-p", "--port", type=int, default=PORT, help=f"bind to port (default: {PORT})"
	)
	res.add_argument("--host", default=HOST, help=f"bind to host (default: {HOST})")
	res.add_argument(
		"-i",
		"--index",
		default="",
		help="serve all paths to index if file not found",
	)
	res.add_argument(
		"--no-list", action="store_true", help="disable file listings"
	)
	res.add_argument(
		"-v", "--verbose", action="store_true", help="display extra information"
	)
	res.add_argument("--version", action="version", version=VERSION)
	return res


def configure(args: list[str] | None = None) -> OverlayConfig:
	"""Parses the command line arguments into a configuration."""
	options = parser().parse_args(args)
	return OverlayConfig.Make(
		options.dirs,
		fallback=options.index,
		listing=not options.no_list,
		host=options.host,
		port=options.port,
		verbose=options.verbose,
	)


def main(args: list[str] | None = None) -> int:
	config = configure(args)
	if config.verbose:
		setLevel(LogLevel.Debug)
	for root in config.roots:
		if not os.path.isdir(root):
			warning("Directory does not exist, it will be skipped", Path=root)
	info("Serving directories", Roots=list(config.roots))
	run(OverlayService(config), host=config.host, port=config.port)
	return 0


if __name__ == "__main__":
	sys.exit(main())

# EOF

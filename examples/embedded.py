"""
Embedded Overlay Example

This demonstrates serving overlaid directories from Python rather than from
the `overlay` command, next to another service.
Features shown:
- `OverlayService` configured with `OverlayConfig.Make`
- A higher priority handler taking precedence over the overlay
- Overlay logging

Usage:
    python embedded.py public dist

Test with:
    curl http://localhost:8080/             # Merged listing (with a browser)
    curl http://localhost:8080/app.js       # First `app.js` found
    curl http://localhost:8080/.status      # Handled by `Status`
"""

import sys

from overlay import HTTPRequest, HTTPResponse, OverlayConfig, OverlayService, Service, on, run
from overlay.utils.logging import info


class Status(Service):
	def __init__(self, config: OverlayConfig):
		super().__init__()
		self.config = config

	@on(priority=1, GET="/.status")
	def status(self, request: HTTPRequest) -> HTTPResponse:
		return request.respond(
			"\n".join(self.config.roots), "text/plain; charset=utf-8"
		)


if __name__ == "__main__":
	config = OverlayConfig.Make(sys.argv[1:])
	info("Starting embedded overlay", Roots=list(config.roots))
	run(Status(config), OverlayService(config), port=config.port)

# EOF

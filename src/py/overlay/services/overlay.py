from pathlib import Path

from ..config import VERSION, OverlayConfig
from ..decorators import on
from ..http.model import HTTPRequest, HTTPResponse
from ..listing import LISTING_CONTENT_TYPE, render
from ..model import Service
from ..resolver import (
	NotFound,
	RenderedListing,
	Resolution,
	ServedFallback,
	ServedFile,
	resolve,
)
from ..utils.logging import debug, exception, logged, warning
from ..validator import validate

SERVER: str = f"overlay/{VERSION}"


def acceptsMarkup(request: HTTPRequest) -> bool:
	return "text/html" in (request.header("Accept") or "")


class OverlayService(Service):
	"""Serves the files of multiple directories, overlaid on top of each
	other in the order given by the configuration."""

	def __init__(self, config: OverlayConfig | None = None):
		self.config: OverlayConfig = config or OverlayConfig()
		super().__init__()

	def resolve(self, request: HTTPRequest) -> Resolution:
		return resolve(
			self.config.roots,
			request.path,
			acceptsMarkup(request),
			listing=self.config.listing,
			fallback=self.config.fallback,
		)

	def respond(self, request: HTTPRequest, resolution: Resolution) -> HTTPResponse:
		match resolution:
			case ServedFile(path=path, file=file, stat=stat) | ServedFallback(
				path=path, file=file, stat=stat
			):
				logged(debug) and debug(
					"Serving file", Client=request.peer, Path=path
				)
				return request.respondContent(Path(path), file, stat)
			case RenderedListing(listings=listings):
				try:
					content = render(listings)
				except Exception as e:
					exception(e, "Could not render listing")
					return request.fail("Internal Server Error")
				return request.respond(content, contentType=LISTING_CONTENT_TYPE)
			case NotFound():
				return request.notFound()
			case _:
				raise ValueError(f"Unsupported resolution: {resolution}")

	@on(GET_HEAD=("/", "/{path:any}"))
	def read(self, request: HTTPRequest, path: str = "") -> HTTPResponse:
		logged(debug) and debug(
			"Request", Client=request.peer, Method=request.method, Path=request.path
		)
		if not validate(request.path):
			warning("Invalid path", Client=request.peer, Path=request.path)
			response = request.badRequest("invalid path")
		else:
			response = self.respond(request, self.resolve(request))
		return response.setHeader("Server", SERVER)


# EOF

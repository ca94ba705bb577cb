import posixpath
from typing import Iterable
from urllib.parse import quote

from .resolver import DirectoryListing, Entry
from .utils.htmpl import H, Node, html, raw

LISTING_CONTENT_TYPE: str = "text/html; charset=utf-8"

LISTING_CSS: str = """
body {
	font-size: 14px;
	font-family: consolas, "Liberation Mono", "DejaVu Sans Mono", Menlo, monospace;
}
a {
	display: block;
	color: blue;
	text-decoration: none;
}
a:hover {
	background-color: #f3f3f3;
}
.req-path {
	color: #bbb;
}
"""


def entryHref(requestPath: str, entry: Entry) -> str:
	"""Returns the absolute, percent-encoded URL of the entry listed at the
	given request path."""
	base = requestPath if requestPath.endswith("/") else f"{requestPath}/"
	if entry.name == "..":
		parent = posixpath.dirname(base.rstrip("/"))
		href = parent if parent.endswith("/") else f"{parent}/"
	else:
		href = f"{base}{entry.name}{'/' if entry.isDirectory else ''}"
	# File names are not necessarily valid UTF-8
	return quote(href, errors="surrogateescape")


def renderEntry(requestPath: str, entry: Entry) -> Node:
	return H.a(
		f"{entry.name}/" if entry.isDirectory else entry.name,
		_="entry dir" if entry.isDirectory else "entry",
		href=entryHref(requestPath, entry),
	)


def renderListing(listing: DirectoryListing) -> list[Node]:
	return [
		H.h3(
			H.span(listing.localPath, _="local-path"),
			H.span(listing.requestPath, _="req-path"),
		),
		*(renderEntry(listing.requestPath, _) for _ in listing.entries),
	]


def render(listings: Iterable[DirectoryListing]) -> bytes:
	"""Renders the listings of each root as one HTML page, with one section
	per listing. Every name and path goes through a text node or a quoted
	attribute, so that file names can't inject markup."""
	listings = list(listings)
	title: str = listings[0].requestPath if listings else "/"
	return "".join(
		html(
			H.html(
				H.head(
					H.meta(charset="UTF-8"),
					H.title(title),
					H.style(raw(LISTING_CSS)),
				),
				H.body(*(H.section(*renderListing(_)) for _ in listings)),
			),
			doctype="html",
		)
	).encode("utf-8", "replace")


# EOF

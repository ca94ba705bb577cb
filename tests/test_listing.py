from overlay.listing import LISTING_CONTENT_TYPE, entryHref, render
from overlay.resolver import PARENT_ENTRY, DirectoryListing, Entry


def listing(root: str, path: str, *entries: Entry) -> DirectoryListing:
	return DirectoryListing(root, path, (PARENT_ENTRY, *entries))


def test_content_type():
	assert LISTING_CONTENT_TYPE.startswith("text/html")


def test_href():
	assert entryHref("/", Entry("foo.txt", False)) == "/foo.txt"
	assert entryHref("/docs", Entry("foo.txt", False)) == "/docs/foo.txt"
	assert entryHref("/docs/", Entry("api", True)) == "/docs/api/"


def test_href_parent():
	assert entryHref("/", PARENT_ENTRY) == "/"
	assert entryHref("/docs", PARENT_ENTRY) == "/"
	assert entryHref("/docs/api/", PARENT_ENTRY) == "/docs/"


def test_href_quoted():
	assert entryHref("/", Entry("a b#c?.txt", False)) == "/a%20b%23c%3F.txt"
	assert entryHref("/", Entry("été", False)) == "/%C3%A9t%C3%A9"


def test_render_sections():
	page = render(
		[
			listing("/srv/a", "/shared", Entry("a.txt", False)),
			listing("/srv/b", "/shared", Entry("b.txt", False), Entry("sub", True)),
		]
	).decode("utf-8")
	assert page.startswith("<!DOCTYPE html>")
	assert page.count("<section") == 2
	assert page.index("/srv/a") < page.index("/srv/b")
	assert 'href="/shared/a.txt"' in page
	assert 'href="/shared/sub/"' in page
	assert ">sub/</a>" in page
	assert ">../</a>" in page
	assert 'class="local-path"' in page
	assert 'class="req-path"' in page


def test_render_entry_order():
	page = render(
		[listing("/srv", "/", Entry("zeta", False), Entry("alpha", False))]
	).decode("utf-8")
	assert page.index(">../</a>") < page.index(">zeta</a>") < page.index(">alpha</a>")


def test_render_escapes_names():
	page = render(
		[listing("/srv/<root>", "/<p>", Entry('<script>alert("x")</script>.txt', False))]
	).decode("utf-8")
	assert "<script>" not in page
	assert "&lt;script&gt;" in page
	assert "/srv/&lt;root&gt;" in page
	assert "<p>" not in page


def test_render_undecodable_names():
	# Names that are not valid UTF-8 come out of `os.scandir` with surrogates
	page = render([listing("/srv", "/", Entry("bad\udcff.txt", False))])
	assert isinstance(page, bytes)
	assert b"/bad%FF.txt" in page


# EOF

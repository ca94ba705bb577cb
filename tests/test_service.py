from pathlib import Path

import pytest

from overlay import HTTPRequest, HTTPResponse, OverlayConfig, OverlayService, mount
from overlay.http.content import httpdate
from overlay.model import Application
from overlay.services.overlay import SERVER

HTML: dict[str, str] = {"Accept": "text/html,application/xhtml+xml,*/*;q=0.8"}


@pytest.fixture
def app(roots) -> Application:
	return mount(OverlayService(OverlayConfig.Make(str(_) for _ in roots)))


def get(
	app: Application,
	path: str,
	headers: dict[str, str] | None = None,
	method: str = "GET",
) -> HTTPResponse:
	return app.process(HTTPRequest.Create(method, path, headers))


def test_file(app):
	res = get(app, "/foo.txt")
	assert res.status == 200
	assert res.read() == b"foo from a"
	assert res.header("Content-Type") == "text/plain; charset=utf-8"
	assert res.header("Content-Length") == "10"
	assert res.header("Server") == SERVER
	assert res.header("Last-Modified")
	assert res.header("Accept-Ranges") == "bytes"


def test_index(app):
	res = get(app, "/site/")
	assert res.status == 200
	assert res.read() == b"<html>site from a</html>"
	assert res.header("Content-Type") == "text/html; charset=utf-8"


def test_head(app):
	res = get(app, "/foo.txt", method="HEAD")
	assert res.status == 200
	assert res.header("Content-Length") == "10"
	res.release()


def test_invalid_path(app):
	for path in ("/../etc/passwd", "/a/../b", "/a\\..\\b"):
		res = get(app, path, HTML)
		assert res.status == 400
		assert res.read() == b"invalid path"
		assert res.header("Server") == SERVER


def test_not_found(app):
	res = get(app, "/nope.txt", HTML)
	assert res.status == 404
	assert res.read() == b"Not Found"


def test_directory_without_markup(app):
	assert get(app, "/shared").status == 404
	assert get(app, "/shared", {"Accept": "application/json"}).status == 404


def test_listing(app, roots):
	res = get(app, "/shared", HTML)
	assert res.status == 200
	assert res.header("Content-Type") == "text/html; charset=utf-8"
	page = res.read().decode("utf-8")
	assert str(roots[0]) in page
	assert str(roots[1]) in page
	assert 'href="/shared/a.txt"' in page
	assert 'href="/shared/b.txt"' in page


def test_listing_disabled(roots):
	app = mount(
		OverlayService(OverlayConfig.Make((str(_) for _ in roots), listing=False))
	)
	assert get(app, "/shared", HTML).status == 404


def test_fallback(roots, tmp_path: Path):
	fallback = tmp_path / "app.html"
	fallback.write_text("<html>app</html>")
	app = mount(
		OverlayService(
			OverlayConfig.Make((str(_) for _ in roots), fallback=str(fallback))
		)
	)
	res = get(app, "/some/route", HTML)
	assert res.status == 200
	assert res.read() == b"<html>app</html>"
	assert get(app, "/some/route").status == 404
	assert get(app, "/foo.txt", HTML).read() == b"foo from a"


def test_deleted_between_requests(app, roots):
	res = get(app, "/only-a.txt")
	assert res.status == 200
	res.release()
	(roots[0] / "only-a.txt").unlink()
	assert get(app, "/only-a.txt").status == 404


def test_method_not_allowed(app):
	for method in ("POST", "PUT", "DELETE"):
		res = get(app, "/foo.txt", method=method)
		assert res.status == 405
		assert "GET" in (res.header("Allow") or "")
		assert "HEAD" in (res.header("Allow") or "")


def test_percent_decoded_traversal(app):
	# The parser decodes `%2e%2e`, which is then rejected
	from overlay.http.parser import HTTPParser

	atoms = list(HTTPParser().feed(b"GET /%2e%2e/etc/passwd HTTP/1.1\r\n\r\n"))
	request = atoms[-1]
	assert isinstance(request, HTTPRequest)
	assert request.path == "/../etc/passwd"
	assert app.process(request).status == 400


# -----------------------------------------------------------------------------
#
# CONDITIONAL AND RANGES
#
# -----------------------------------------------------------------------------


def test_not_modified(app, roots):
	modified = (roots[0] / "foo.txt").stat().st_mtime
	res = get(app, "/foo.txt", {"If-Modified-Since": httpdate(modified)})
	assert res.status == 304
	assert res.body is None
	assert res.header("Content-Length") is None


def test_modified(app, roots):
	modified = (roots[0] / "foo.txt").stat().st_mtime
	res = get(app, "/foo.txt", {"If-Modified-Since": httpdate(modified - 3600)})
	assert res.status == 200
	assert res.read() == b"foo from a"


def test_range(app):
	res = get(app, "/foo.txt", {"Range": "bytes=4-7"})
	assert res.status == 206
	assert res.header("Content-Range") == "bytes 4-7/10"
	assert res.header("Content-Length") == "4"
	assert res.read() == b"from"


def test_range_suffix(app):
	res = get(app, "/foo.txt", {"Range": "bytes=-1"})
	assert res.status == 206
	assert res.read() == b"a"


def test_range_unsatisfiable(app):
	res = get(app, "/foo.txt", {"Range": "bytes=100-"})
	assert res.status == 416
	assert res.header("Content-Range") == "bytes */10"


def test_range_if_range(app, roots):
	modified = (roots[0] / "foo.txt").stat().st_mtime
	res = get(
		app,
		"/foo.txt",
		{"Range": "bytes=0-2", "If-Range": httpdate(modified - 3600)},
	)
	assert res.status == 200
	assert res.read() == b"foo from a"
	res = get(app, "/foo.txt", {"Range": "bytes=0-2", "If-Range": httpdate(modified)})
	assert res.status == 206
	assert res.read() == b"foo"


def test_empty_file(tmp_path: Path, tree):
	root = tree(tmp_path / "root", {"empty.txt": ""})
	app = mount(OverlayService(OverlayConfig.Make([str(root)])))
	res = get(app, "/empty.txt")
	assert res.status == 200
	assert res.header("Content-Length") == "0"
	assert res.read() == b""


def test_binary_sniffing(tmp_path: Path):
	root = tmp_path / "root"
	root.mkdir()
	(root / "data").write_bytes(b"\x00\x01\x02\x03")
	(root / "page").write_bytes(b"<!DOCTYPE html><p>hi</p>")
	app = mount(OverlayService(OverlayConfig.Make([str(root)])))
	res = get(app, "/data")
	assert res.header("Content-Type") == "application/octet-stream"
	assert res.read() == b"\x00\x01\x02\x03"
	res = get(app, "/page")
	assert res.header("Content-Type") == "text/html; charset=utf-8"
	res.release()


# EOF

import io

from overlay.utils.files import contentType, isText, sniff
from overlay.utils.limits import LimitType, limit, unlimit


def test_content_type_extension():
	assert contentType("a/b.html") == "text/html; charset=utf-8"
	assert contentType("app.mjs") == "text/javascript"
	assert contentType("module.wasm") == "application/wasm"
	assert contentType("image.png") == "image/png"


def test_content_type_sniffed():
	assert contentType("README", io.BytesIO(b"Just text")) == "text/plain; charset=utf-8"
	assert contentType("page", io.BytesIO(b"  <!doctype html>")) == "text/html; charset=utf-8"
	assert contentType("blob", io.BytesIO(b"\x89\x00\x01")) == "application/octet-stream"
	assert contentType("blob") == "application/octet-stream"


def test_sniff_keeps_position():
	file = io.BytesIO(b"0123456789")
	file.seek(3)
	sniff(file)
	assert file.tell() == 3


def test_is_text():
	assert isText(b"hello")
	assert isText("été".encode("utf-8"))
	# Truncated in the middle of a multi-byte character
	assert isText("été".encode("utf-8")[:-1])
	assert not isText(b"\xff\xfe\x00")
	assert not isText(b"a\x00b")


def test_unlimit():
	before = limit(LimitType.Files)
	res = unlimit(LimitType.Files)
	assert res is False or res >= before.soft or before.soft < 0


# EOF

import pytest

from overlay.validator import validate


@pytest.mark.parametrize(
	"path",
	[
		"/",
		"/foo.txt",
		"/a..b",
		"/...",
		"/..foo",
		"/foo../bar",
		"/a/./b",
		"",
		"//double//slashes",
	],
)
def test_valid(path: str):
	assert validate(path)


@pytest.mark.parametrize(
	"path",
	[
		"..",
		"/..",
		"/../etc/passwd",
		"/a/../b",
		"/a/..",
		"/a\\..\\b",
		"..\\windows",
		"/a/b\\..",
	],
)
def test_invalid(path: str):
	assert not validate(path)


def test_no_normalization():
	# Only exact `..` fields are rejected, other oddities are left as is
	assert validate("/./././x")
	assert validate("/x/.../y")


# EOF

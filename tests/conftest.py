from pathlib import Path

import pytest

from overlay.utils.logging import LogLevel, setLevel


def makeTree(root: Path, files: dict[str, str | None]) -> Path:
	"""Creates the given files (or directories, when the content is `None`)
	under `root`."""
	root.mkdir(parents=True, exist_ok=True)
	for name, content in files.items():
		path = root / name
		if content is None:
			path.mkdir(parents=True, exist_ok=True)
		else:
			path.parent.mkdir(parents=True, exist_ok=True)
			path.write_text(content)
	return root


@pytest.fixture
def tree():
	return makeTree


@pytest.fixture
def roots(tmp_path: Path) -> tuple[Path, Path]:
	"""Two roots `a` and `b`, with `a` taking precedence."""
	a = makeTree(
		tmp_path / "a",
		{
			"foo.txt": "foo from a",
			"only-a.txt": "only in a",
			"sub": "a file named sub",
			"site/index.html": "<html>site from a</html>",
			"shared/a.txt": "a",
		},
	)
	b = makeTree(
		tmp_path / "b",
		{
			"foo.txt": "foo from b",
			"only-b.txt": "only in b",
			"sub/inner.txt": "inner",
			"site/page.html": "<html>page from b</html>",
			"docs/index.html": "<html>docs from b</html>",
			"shared/b.txt": "b",
			"empty": None,
		},
	)
	return a, b


@pytest.fixture(autouse=True)
def quiet():
	previous = setLevel(LogLevel.Error)
	yield
	setLevel(previous)


# EOF

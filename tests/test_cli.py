import pytest

from overlay.__main__ import configure, parser
from overlay.config import HOST, PORT, VERSION, OverlayConfig


def test_defaults():
	config = configure([])
	assert config == OverlayConfig()
	assert config.roots == (".",)
	assert config.fallback == ""
	assert config.listing is True
	assert config.port == PORT
	assert config.host == HOST
	assert config.verbose is False


def test_roots_order():
	assert configure(["public", "dist", "src"]).roots == ("public", "dist", "src")


def test_options():
	config = configure(
		["-p", "9000", "--host", "0.0.0.0", "-i", "index.html", "--no-list", "-v", "a"]
	)
	assert config.port == 9000
	assert config.host == "0.0.0.0"
	assert config.fallback == "index.html"
	assert config.listing is False
	assert config.verbose is True
	assert config.roots == ("a",)


def test_long_options():
	config = configure(["--port", "1234", "--index", "app.html", "--verbose"])
	assert config.port == 1234
	assert config.fallback == "app.html"
	assert config.verbose


def test_invalid_port():
	with pytest.raises(SystemExit):
		configure(["-p", "http"])


def test_version(capsys):
	with pytest.raises(SystemExit) as e:
		parser().parse_args(["--version"])
	assert e.value.code == 0
	assert VERSION in capsys.readouterr().out


def test_make():
	assert OverlayConfig.Make().roots == (".",)
	assert OverlayConfig.Make([]).roots == (".",)
	assert OverlayConfig.Make(iter(["a", "b"])).roots == ("a", "b")
	assert OverlayConfig.Make(fallback=None).fallback == ""


# EOF

from overlay.utils.logging import (
	LogLevel,
	debug,
	error,
	event,
	exception,
	formatData,
	getLevel,
	info,
	logged,
	setLevel,
	warning,
)


def test_levels(capsys):
	setLevel(LogLevel.Warning)
	debug("Hidden debug")
	info("Hidden info")
	warning("Shown warning", Path="/x")
	err = capsys.readouterr().err
	assert "Hidden" not in err
	assert "Shown warning" in err
	assert "/x" in err


def test_set_level():
	previous = setLevel(LogLevel.Debug)
	try:
		assert getLevel() == LogLevel.Debug
		assert logged(debug)
		assert logged(info)
	finally:
		setLevel(previous)
	assert getLevel() == previous


def test_logged():
	setLevel(LogLevel.Error)
	assert not logged(debug)
	assert not logged(info)
	assert not logged(warning)
	assert logged(error)
	assert logged(exception)


def test_event(capsys):
	setLevel(LogLevel.Info)
	event("GET", "/foo.txt", Client="127.0.0.1:5000")
	err = capsys.readouterr().err
	assert "GET" in err
	assert "/foo.txt" in err
	assert "127.0.0.1:5000" in err


def test_exception(capsys):
	try:
		raise RuntimeError("boom")
	except RuntimeError as e:
		exception(e, "Could not render listing")
	err = capsys.readouterr().err
	assert "Could not render listing" in err


def test_format():
	assert formatData(None) == "◌"
	assert formatData(True) == "✓"
	assert formatData("a b") == "'a b'"
	assert formatData(["a", 1]) == "a,1"
	assert formatData(0.5) == "0.50"


# EOF

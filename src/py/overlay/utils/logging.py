import sys
import traceback
from enum import Enum
from typing import Any, Callable, NamedTuple, TypeAlias

from .term import Term

__doc__ = """
A small structured logger writing to stderr. Every logging function takes a
message (or event name) and keyword context, rendered as `Key=value` pairs,
so that the same call can be read by humans and grepped for values:

>    [overlay] Serving file Client=127.0.0.1:51234 Path=public/app.js
"""

TPrimitive: TypeAlias = None | bool | int | float | str | bytes | list | tuple | dict

ORIGIN: str = "overlay"


class LogLevel(Enum):
	Debug = 0
	Info = 10
	Warning = 30
	Error = 40  # A managed error
	Exception = 50  # An un-managed error


LOG_LEVEL_COLOR: dict[LogLevel, int] = {
	LogLevel.Debug: 31,
	LogLevel.Info: 75,
	LogLevel.Warning: 202,
	LogLevel.Error: 160,
	LogLevel.Exception: 124,
}

# Entries below this level are discarded
LOG_LEVEL: list[LogLevel] = [LogLevel.Info]


class LogEntry(NamedTuple):
	level: LogLevel
	message: str
	context: dict[str, TPrimitive]
	# Events have a name (the message) and a value
	isEvent: bool = False
	value: TPrimitive = None
	icon: str | None = None


def setLevel(level: LogLevel) -> LogLevel:
	"""Sets the minimum level of the entries that are written, returning the
	previous one so that it can be restored."""
	previous, LOG_LEVEL[0] = LOG_LEVEL[0], level
	return previous


def getLevel() -> LogLevel:
	return LOG_LEVEL[0]


def formatData(value: Any) -> str:
	if value is None or value == () or value == [] or value == {}:
		return "◌"
	elif isinstance(value, bool):
		return "✓" if value else "✗"
	elif isinstance(value, float):
		return f"{value:0.2f}"
	elif isinstance(value, str):
		return repr(value) if " " in value else value
	elif isinstance(value, (list, tuple)):
		return ",".join(formatData(_) for _ in value)
	elif isinstance(value, dict):
		return " ".join(
			f"{Term.BOLD}{k}{Term.NORMAL}={formatData(v)}" for k, v in value.items()
		)
	else:
		return str(value)


def formatEntry(entry: LogEntry) -> str:
	clr: str = Term.Color(LOG_LEVEL_COLOR[entry.level])
	head: str = f"{clr}{Term.BOLD}[{ORIGIN}]"
	context: str = f" {formatData(entry.context)}" if entry.context else ""
	if entry.isEvent:
		return f"{head} {entry.message}{Term.RESET} {formatData(entry.value)}{context}{Term.RESET}\n"
	icon: str = f" {entry.icon}" if entry.icon else ""
	return f"{head}{Term.RESET}{icon} {entry.message}{context}{Term.RESET}\n"


def send(entry: LogEntry) -> LogEntry:
	if entry.level.value >= LOG_LEVEL[0].value:
		# Looked up on each call, so that the stream can be redirected
		out = sys.stderr
		out.write(formatEntry(entry))
		out.flush()
	return entry


def log(
	level: LogLevel,
	message: str,
	context: dict[str, TPrimitive],
	*,
	icon: str | None = None,
) -> LogEntry:
	return send(LogEntry(level, message, context, icon=icon))


def debug(message: str, *, icon: str | None = None, **context: TPrimitive) -> LogEntry:
	return log(LogLevel.Debug, message, context, icon=icon)


def info(message: str, *, icon: str | None = None, **context: TPrimitive) -> LogEntry:
	return log(LogLevel.Info, message, context, icon=icon)


def warning(
	message: str, *, icon: str | None = None, **context: TPrimitive
) -> LogEntry:
	return log(LogLevel.Warning, message, context, icon=icon)


def error(
	message: str,
	code: int | str | None = None,
	*,
	icon: str | None = None,
	**context: TPrimitive,
) -> LogEntry:
	"""Logs a managed error, identified by an optional `code`."""
	return log(
		LogLevel.Error,
		message,
		context if code is None else {"Code": code} | context,
		icon=icon,
	)


def event(event: str, value: Any = None, **context: TPrimitive) -> LogEntry:
	"""Logs a named event, like a request line or a shutdown."""
	return send(LogEntry(LogLevel.Info, event, context, isEvent=True, value=value))


def exception(
	exception: BaseException,
	message: str | None = None,
) -> BaseException:
	"""Logs an un-managed exception along with its traceback. Exceptions are
	always logged, whatever the level."""
	name: str = exception.__class__.__name__
	try:
		out = sys.stderr
		out.write(
			f"!!! EXCP {message + ': ' if message else ''}[{name}] {exception}\n"
		)
		for frame in traceback.extract_tb(exception.__traceback__):
			out.write(
				f"... in {frame.name:15s} at {frame.lineno or 0:4d} in {frame.filename}\n"
			)
		out.flush()
	except Exception:  # nosec: B110
		# This is called from exception handlers, so it must never raise.
		pass
	# Returned so that it can be used as `raise exception(e)`
	return exception


LOG_FUNCTION_LEVEL: dict[Callable[..., Any], LogLevel] = {
	debug: LogLevel.Debug,
	info: LogLevel.Info,
	event: LogLevel.Info,
	warning: LogLevel.Warning,
	error: LogLevel.Error,
}


def logged(item: Callable[..., Any]) -> bool:
	"""Tells if the given logging function currently writes anything. This
	guards entries that are costly to build:

	>    logged(debug) and debug("Response sent", Status=res.status)
	"""
	return LOG_FUNCTION_LEVEL.get(item, LogLevel.Exception).value >= LOG_LEVEL[0].value


# EOF

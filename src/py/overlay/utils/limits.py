from typing import NamedTuple
from enum import Enum
import resource


class LimitType(Enum):
	Files = resource.RLIMIT_NOFILE


# Every in-flight file response holds a descriptor, on top of its socket.
REASONABLE_LIMITS: dict[LimitType, int] = {
	LimitType.Files: 10 * 10240,
}


class Limit(NamedTuple):
	type: LimitType
	soft: int
	hard: int


def limit(scope: LimitType) -> Limit:
	return Limit(scope, *resource.getrlimit(scope.value))


def unlimit(
	scope: LimitType, ratio: float = 1.0, *, maximum: int | None = 0
) -> int | bool:
	"""Raises the soft limit for the given scope towards the hard limit,
	capped to a reasonable maximum. Returns the new limit or `False`."""
	lm = limit(scope)
	if lm.soft == resource.RLIM_INFINITY:
		return lm.soft
	hard = lm.hard if lm.hard != resource.RLIM_INFINITY else None
	try:
		target = int(lm.soft + ratio * (hard - lm.soft)) if hard else lm.soft
		# Darwin reports limits high enough to trigger OverflowErrors
		maximum = REASONABLE_LIMITS.get(scope) if maximum == 0 else maximum
		if maximum:
			target = min(maximum, target) if hard else max(maximum, target)
		if target <= lm.soft:
			return lm.soft
		resource.setrlimit(scope.value, (target, lm.hard))
		return target
	except ValueError:
		return False
	except OSError:
		return False


# EOF

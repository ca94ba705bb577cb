from typing import ClassVar, Callable, TypeVar, Any, cast

T = TypeVar("T")


class Extra:
	"""Defines the attributes used by decorators to annotate handlers"""

	ON: ClassVar[str] = "_overlay_on"
	ON_PRIORITY: ClassVar[str] = "_overlay_on_priority"

	@staticmethod
	def Meta(scope: Any) -> dict[str, Any]:
		"""Returns the dictionary of meta attributes for the given function."""
		if not hasattr(scope, "__dict__"):
			raise RuntimeError(f"Metadata cannot be attached to object: {scope}")
		return cast(dict[str, Any], scope.__dict__)


def on(
	priority: int = 0, **methods: str | list[str] | tuple[str, ...]
) -> Callable[[T], T]:
	"""The `@on` decorator marks a service method as a request handler.

	Keyword arguments are HTTP methods (joined with `_` to register more than
	one, as in `GET_HEAD`) mapped to one or more route templates (see
	`Route`). The decorated method takes the `request` followed by the
	parameters of the route, and returns a response:

	>    @on(GET_HEAD="/files/{path:any}")
	>    def read(self, request, path):
	>        return request.respond(...)
	"""

	def decorator(function: T) -> T:
		meta = Extra.Meta(function)
		v = meta.setdefault(Extra.ON, [])
		meta.setdefault(Extra.ON_PRIORITY, priority)
		for http_methods, url in list(methods.items()):
			urls = (url,) if isinstance(url, str) else url
			for http_method in http_methods.upper().split("_"):
				for _ in urls:
					v.append((http_method, _))
		return function

	return decorator


# EOF

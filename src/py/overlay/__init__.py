from .http.model import (
	HTTPRequest,
	HTTPResponse,
	HTTPRequestError,
)  # NOQA: F401
from .decorators import on  # NOQA: F401
from .config import VERSION, OverlayConfig  # NOQA: F401
from .server import run  # NOQA: F401
from .model import Application, Service, mount  # NOQA: F401
from .services.overlay import OverlayService  # NOQA: F401

__version__: str = VERSION

# EOF

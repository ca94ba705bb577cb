import asyncio
import errno
import socket
import threading
from signal import SIGINT, SIGTERM
from typing import Any, Callable, Literal, NamedTuple

from .config import HOST, LOG_REQUESTS, PORT
from .http.model import (
	HTTPBodyFile,
	HTTPBodyWriter,
	HTTPProcessingStatus,
	HTTPRequest,
	HTTPResponse,
)
from .http.parser import HTTPParser
from .model import Application, Service, mount
from .utils.limits import LimitType, unlimit
from .utils.logging import debug, error, event, exception, info, logged, warning


class ServerOptions(NamedTuple):
	host: str = HOST
	port: int = PORT
	backlog: int = 10_000
	# Timeout when waiting for new connections, so that stop conditions
	# are checked regularly.
	polling: float = 1.0
	readsize: int = 4_096
	keepalive: float = 30.0
	logRequests: bool = LOG_REQUESTS
	condition: Callable[[], bool] | None = None
	stopSignals: bool = True
	# Number of following ports tried when the port is not available
	portRetries: int = 4


OPTIONS: ServerOptions = ServerOptions()


def plainResponse(status: int, message: str) -> bytes:
	body = message.encode("ascii")
	return (
		f"HTTP/1.1 {status} {message}\r\n"
		"Content-Type: text/plain\r\n"
		f"Content-Length: {len(body)}\r\n"
		"Connection: close\r\n"
		"\r\n"
	).encode("ascii") + body


# Sent as is, when the request can't be parsed or the application fails
SERVER_BAD_REQUEST: bytes = plainResponse(400, "Bad Request")
SERVER_HEADERS_TOO_LARGE: bytes = plainResponse(431, "Request Header Fields Too Large")
SERVER_BODY_TOO_LARGE: bytes = plainResponse(413, "Payload Too Large")
SERVER_ERROR: bytes = plainResponse(500, "Internal Server Error")

# Requests rejected by the parser, after which the connection is closed
SERVER_REJECTIONS: dict[HTTPProcessingStatus, tuple[str, bytes]] = {
	HTTPProcessingStatus.BadFormat: ("Malformed request", SERVER_BAD_REQUEST),
	HTTPProcessingStatus.HeadersTooLarge: (
		"Request headers too large",
		SERVER_HEADERS_TOO_LARGE,
	),
	HTTPProcessingStatus.BodyTooLarge: ("Request body too large", SERVER_BODY_TOO_LARGE),
}


def closesConnection(request: HTTPRequest) -> bool:
	return (
		request.protocol == "HTTP/1.0"
		or (request.header("Connection") or "").lower() == "close"
	)


def peerName(client: socket.socket) -> str:
	try:
		host, port = client.getpeername()[:2]
		return f"{host}:{port}"
	except (OSError, TypeError, ValueError):
		# Unix sockets have no address
		return f"{id(client):x}"


class SocketWriter(HTTPBodyWriter):
	"""Writes response heads and bodies to a non-blocking client socket,
	sending files with `sendfile` where the platform supports it."""

	def __init__(
		self,
		client: socket.socket,
		loop: asyncio.AbstractEventLoop,
	) -> None:
		super().__init__()
		self.client: socket.socket = client
		self.loop: asyncio.AbstractEventLoop = loop

	async def _writeBytes(
		self, chunk: bytes | None | Literal[False], more: bool = False
	) -> bool:
		if chunk:
			await self.loop.sock_sendall(self.client, chunk)
		return True

	async def _writeFile(self, body: HTTPBodyFile, size: int = 64_000) -> bool:
		# `sendfile` rejects a zero count
		if body.length == 0:
			return True
		# Falls back to reading and sending when `sendfile` is not available
		await self.loop.sock_sendfile(
			self.client, body.file, body.offset, body.length
		)
		return True


class OverlayServer:
	"""Serves an application over plain sockets with asyncio. Requests are
	processed in worker threads, as resolving them is blocking filesystem
	work, while the event loop only moves bytes."""

	def __init__(self, app: Application, options: ServerOptions = OPTIONS):
		self.app: Application = app
		self.options: ServerOptions = options
		self.isRunning: bool = False

	def stop(self) -> None:
		info("Server stopping…")
		self.isRunning = False

	def onException(
		self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]
	) -> None:
		if e := context.get("exception"):
			exception(e)

	async def respond(
		self, request: HTTPRequest, writer: HTTPBodyWriter
	) -> HTTPResponse | None:
		"""Processes the request and writes the response, returning it, or
		`None` when no complete response could be sent. The response body is
		released in every case, including when the client goes away."""
		try:
			res: HTTPResponse = await asyncio.to_thread(self.app.process, request)
		except Exception as e:
			exception(e, "Could not process request")
			await writer.write(SERVER_ERROR)
			return None
		try:
			if closesConnection(request):
				res.setHeader("Connection", "close")
			await writer.write(res.head())
			# `HEAD` responses have the headers of the `GET` but no body
			if request.method != "HEAD":
				await writer.write(res.body)
		except (BrokenPipeError, ConnectionResetError):
			logged(debug) and debug(
				"Client disconnected", Client=request.peer, Path=request.path
			)
			return None
		finally:
			res.release()
		logged(debug) and debug(
			"Response sent",
			Client=request.peer,
			Method=request.method,
			Path=request.path,
			Status=res.status,
		)
		return res

	async def connection(
		self, client: socket.socket, loop: asyncio.AbstractEventLoop
	) -> None:
		"""Reads and answers the requests sent over the client connection, until
		the client closes it, the keep-alive expires or a response requires
		closing it."""
		options = self.options
		peer: str = peerName(client)
		buffer = bytearray(options.readsize)
		parser = HTTPParser()
		writer = SocketWriter(client, loop)
		status = HTTPProcessingStatus.Processing
		requests: int = 0
		responses: int = 0
		alive: bool = True
		try:
			while alive:
				try:
					n = await asyncio.wait_for(
						loop.sock_recv_into(client, buffer), timeout=options.keepalive
					)
				except asyncio.TimeoutError:
					status = HTTPProcessingStatus.Timeout
					break
				if not n:
					status = HTTPProcessingStatus.NoData
					break
				# A single read may hold more than one request (pipelining)
				for atom in parser.feed(bytes(buffer[:n])):
					if isinstance(atom, HTTPProcessingStatus) and atom in SERVER_REJECTIONS:
						message, rejection = SERVER_REJECTIONS[atom]
						warning(message, Client=peer)
						await loop.sock_sendall(client, rejection)
						alive = False
						break
					elif not isinstance(atom, HTTPRequest):
						continue
					atom.peer = peer
					requests += 1
					if options.logRequests:
						event(atom.method, atom.path, Client=peer)
					res = await self.respond(atom, writer)
					if res is None:
						alive = False
						break
					responses += 1
					if res.shouldClose or closesConnection(atom):
						alive = False
			if responses != requests:
				warning(
					"Incomplete responses",
					Client=peer,
					Requests=requests,
					Responses=responses,
					Status=status.name,
				)
		except (BrokenPipeError, ConnectionResetError):
			pass
		except Exception as e:
			exception(e)
		finally:
			client.close()

	def bind(self) -> tuple[socket.socket, int]:
		"""Creates the server socket, bound to the configured host and port or
		one of the following ports when it is already in use."""
		host, port = self.options.host, self.options.port
		server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
		server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
		server.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
		failure: OSError | None = None
		for candidate in range(port, port + 1 + self.options.portRetries):
			try:
				server.bind((host, candidate))
			except OSError as e:
				if candidate == port:
					warning("Port unavailable, trying the next ones", Host=host, Port=port)
				failure = e
				continue
			if candidate != port:
				info("Found alternate available port", Port=candidate)
			return server, candidate
		server.close()
		error("Unable to bind to any port, aborting", "HOSTPORTERR", Host=host, Port=port)
		raise failure or OSError(errno.EADDRINUSE, "No port available")

	async def serve(self) -> None:
		options = self.options
		server, port = self.bind()
		server.listen(options.backlog)
		server.setblocking(False)
		loop = asyncio.get_running_loop()
		tasks: set[asyncio.Task[None]] = set()
		# Signal handlers can only be registered from the main thread
		if options.stopSignals and threading.current_thread() is threading.main_thread():
			for signal in (SIGINT, SIGTERM):
				loop.add_signal_handler(signal, self.stop)
		loop.set_exception_handler(self.onException)
		info("Overlay server listening", icon="🚀", URL=f"http://{options.host}:{port}")
		self.isRunning = True
		try:
			while self.isRunning:
				if options.condition and not options.condition():
					break
				try:
					client, _ = await asyncio.wait_for(
						loop.sock_accept(server), timeout=options.polling or 1.0
					)
				except asyncio.TimeoutError:
					continue
				except OSError as e:
					if e.errno == errno.EMFILE:
						# Out of descriptors, in-flight responses will free some
						await asyncio.sleep(0.1)
					else:
						exception(e)
					continue
				task = loop.create_task(self.connection(client, loop))
				tasks.add(task)
				task.add_done_callback(tasks.discard)
		finally:
			server.close()
			for task in tasks:
				task.cancel()
			await asyncio.gather(*tasks, return_exceptions=True)


def run(
	*components: Application | Service,
	host: str = HOST,
	port: int = PORT,
	backlog: int = OPTIONS.backlog,
	condition: Callable[[], bool] | None = None,
	polling: float = OPTIONS.polling,
	logRequests: bool = LOG_REQUESTS,
	keepalive: float = OPTIONS.keepalive,
) -> None:
	"""Mounts the components and serves them until interrupted."""
	unlimit(LimitType.Files)
	server = OverlayServer(
		mount(*components),
		ServerOptions(
			host=host,
			port=port,
			backlog=backlog,
			condition=condition,
			polling=polling,
			logRequests=logRequests,
			keepalive=keepalive,
		),
	)
	try:
		asyncio.run(server.serve())
	except KeyboardInterrupt:
		event("ManualShutdown")
	event("EOK")


# EOF

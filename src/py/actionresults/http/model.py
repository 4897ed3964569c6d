from abc import ABC, abstractmethod
from typing import NamedTuple

from .status import HTTP_STATUS

# -----------------------------------------------------------------------------
#
# HELPERS
#
# -----------------------------------------------------------------------------


def headername(name: str, *, headers: dict[str, str] = {}) -> str:
	"""Normalizes the header name as `Kebab-Case`."""
	if name in headers:
		return headers[name]
	key: str = name.lower()
	if key in headers:
		return headers[key]
	else:
		normalized: str = "-".join(_.capitalize() for _ in name.split("-"))
		headers[key] = normalized
		return normalized


# -----------------------------------------------------------------------------
#
# DATA MODEL
#
# -----------------------------------------------------------------------------


class HTTPHeaders(NamedTuple):
	"""Wraps HTTP headers, keeping key information for response processing."""

	headers: dict[str, str]


# -----------------------------------------------------------------------------
#
# BODY WRITER
#
# -----------------------------------------------------------------------------


class HTTPBodyWriter(ABC):
	"""An append-only sink for response bodies. Writers are owned by the
	caller: results only ever append to them, they never close, seek or
	truncate them."""

	__slots__ = ["shouldClose", "written"]

	def __init__(self) -> None:
		# Set when the body could not be sent in full, in which case the
		# connection can't be reused.
		self.shouldClose: bool = False
		self.written: int = 0

	async def write(self, chunk: bytes | bytearray | memoryview | None) -> bool:
		"""Appends the given chunk, returning once the underlying transport
		has accepted it."""
		if chunk is None:
			return True
		elif isinstance(chunk, (bytes, bytearray, memoryview)):
			data: bytes = bytes(chunk)
			res = await self._writeBytes(data)
			self.written += len(data)
			return res
		else:
			raise ValueError(f"Unsupported body chunk: {type(chunk)}")

	async def flush(self) -> bool:
		return True

	@abstractmethod
	async def _writeBytes(self, chunk: bytes) -> bool: ...


# -----------------------------------------------------------------------------
#
# RESPONSE
#
# -----------------------------------------------------------------------------


class HTTPResponse:
	"""The head of an HTTP response, as prepared by the dispatcher and
	amended by results before their body is written."""

	__slots__ = ["protocol", "status", "message", "headers"]

	def __init__(
		self,
		status: int = 200,
		message: str | None = None,
		headers: dict[str, str] | None = None,
		protocol: str = "HTTP/1.1",
	):
		self.protocol: str = protocol
		self.status: int = status
		self.message: str | None = message
		self.headers: HTTPHeaders = HTTPHeaders(
			{headername(k): v for k, v in headers.items()} if headers else {}
		)

	@property
	def contentType(self) -> str | None:
		return self.getHeader("Content-Type")

	def getHeader(self, name: str) -> str | None:
		return self.headers.headers.get(headername(name))

	def setHeader(self, name: str, value: str | int | None) -> "HTTPResponse":
		if value is None:
			self.headers.headers.pop(headername(name), None)
		else:
			self.headers.headers[headername(name)] = str(value)
		return self

	def setHeaders(self, headers: dict[str, str | int | None]) -> "HTTPResponse":
		for k, v in headers.items():
			self.setHeader(k, v)
		return self

	def head(self) -> bytes:
		"""Serializes the head as a payload."""
		message: str = self.message or HTTP_STATUS.get(self.status, "Unknown status")
		lines: list[str] = [
			f"{headername(k)}: {v}" for k, v in self.headers.headers.items()
		]
		lines.insert(0, f"{self.protocol} {self.status} {message}")
		lines.append("")
		lines.append("")
		# NOTE: Header values are expected to be ASCII, non-ASCII download
		# names are encoded by the results themselves.
		return "\r\n".join(lines).encode("ascii")

	def __str__(self) -> str:
		return f"Response({self.protocol} {self.status} {self.message} {self.headers.headers})"


# EOF

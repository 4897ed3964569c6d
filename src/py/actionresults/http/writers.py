import asyncio
import socket
from typing import BinaryIO

from .model import HTTPBodyWriter


class BufferBodyWriter(HTTPBodyWriter):
	"""Accumulates the body in memory, typically for tests and in-process
	bridges."""

	__slots__ = ["buffer"]

	def __init__(self) -> None:
		super().__init__()
		self.buffer: bytearray = bytearray()

	@property
	def value(self) -> bytes:
		return bytes(self.buffer)

	async def _writeBytes(self, chunk: bytes) -> bool:
		self.buffer += chunk
		return True


class FileBodyWriter(HTTPBodyWriter):
	"""Writes the body to a binary file object (for instance
	`sys.stdout.buffer`). The file is not closed by the writer."""

	__slots__ = ["file"]

	def __init__(self, file: BinaryIO) -> None:
		super().__init__()
		self.file: BinaryIO = file

	async def _writeBytes(self, chunk: bytes) -> bool:
		self.file.write(chunk)
		return True

	async def flush(self) -> bool:
		self.file.flush()
		return True


class AIOStreamBodyWriter(HTTPBodyWriter):
	"""Specialized body writer to work with AIO streams. Each chunk is
	drained before returning, so that a slow client throttles reads."""

	__slots__ = ["stream"]

	def __init__(self, stream: asyncio.StreamWriter) -> None:
		super().__init__()
		self.stream: asyncio.StreamWriter = stream

	async def _writeBytes(self, chunk: bytes) -> bool:
		self.stream.write(chunk)
		await self.stream.drain()
		return True

	async def flush(self) -> bool:
		await self.stream.drain()
		return True


class AIOSocketBodyWriter(HTTPBodyWriter):
	"""Specialized body writer to work with AIO sockets."""

	__slots__ = ["client", "loop"]

	def __init__(
		self,
		client: "socket.socket",
		loop: asyncio.AbstractEventLoop | None = None,
	) -> None:
		super().__init__()
		self.client: socket.socket = client
		self.loop: asyncio.AbstractEventLoop = loop or asyncio.get_running_loop()

	async def _writeBytes(self, chunk: bytes) -> bool:
		await self.loop.sock_sendall(self.client, chunk)
		return True


# EOF

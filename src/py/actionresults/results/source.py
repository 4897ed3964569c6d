import asyncio
import inspect
from typing import Any

from ..utils.logging import debug, logged
from .model import InvalidArgument, ResultConsumed


def hasFileDescriptor(source: Any) -> bool:
	"""Tells if the source is backed by an OS-level file descriptor, in which
	case reads may block."""
	try:
		return isinstance(source.fileno(), int)
	except (AttributeError, OSError, ValueError):
		return False


def isAsyncReader(source: Any) -> bool:
	return inspect.iscoroutinefunction(getattr(source, "read", None))


class SourceHandle:
	"""Exclusively owns an already open, readable byte source. The source
	can be a regular binary file object (`open(path, "rb")`, `BytesIO`),
	or an asynchronous reader with an awaitable `read(size)`
	(`asyncio.StreamReader`, `aiofiles` handles).

	Blocking reads (file descriptors) are offloaded to the loop's default
	executor, so that the event loop is never blocked by disk I/O."""

	__slots__ = ["source", "offload", "isReleased"]

	def __init__(self, source: Any, *, offload: bool | None = None):
		if source is None:
			raise InvalidArgument("Source handle requires a source, got None")
		if not callable(getattr(source, "read", None)):
			raise InvalidArgument(
				f"Source must have a `read(size)` method, got: {type(source)}"
			)
		self.source: Any = source
		self.offload: bool = (
			(hasFileDescriptor(source) and not isAsyncReader(source))
			if offload is None
			else offload
		)
		self.isReleased: bool = False

	async def read(self, size: int) -> bytes:
		"""Reads up to `size` bytes, returning an empty payload at the end of
		the data."""
		if self.isReleased:
			raise ResultConsumed("Source has already been released")
		if self.offload:
			chunk = await asyncio.get_running_loop().run_in_executor(
				None, self.source.read, size
			)
		else:
			chunk = self.source.read(size)
		if inspect.isawaitable(chunk):
			chunk = await chunk
		if chunk is None:
			return b""
		elif isinstance(chunk, bytes):
			return chunk
		elif isinstance(chunk, (bytearray, memoryview)):
			return bytes(chunk)
		else:
			raise TypeError(f"Source returned a non-bytes chunk: {type(chunk)}")

	async def release(self) -> bool:
		"""Closes the source. Only the first call does anything, returning
		`True`."""
		if self.isReleased:
			return False
		self.isReleased = True
		close = getattr(self.source, "close", None)
		if close:
			res = close()
			if inspect.isawaitable(res):
				# The close runs to completion even if the awaiting task is
				# cancelled, as the handle already counts as released.
				await asyncio.shield(res)
		logged(debug) and debug("Source released", Source=type(self.source).__name__)
		return True

	def __str__(self) -> str:
		return f"SourceHandle({type(self.source).__name__}{' released' if self.isReleased else ''})"


# EOF

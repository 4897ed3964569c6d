import asyncio
from abc import abstractmethod
from typing import Any, ClassVar
from urllib.parse import quote

from ..cancellation import CANCELLATION_NONE, Cancellation
from ..config import DEFAULT_CONTENT_TYPE
from ..http.model import HTTPBodyWriter
from ..utils.files import contentType as guessContentType
from ..utils.logging import debug, exception, logged
from .model import (
	ActionContext,
	ActionResult,
	Cancelled,
	InvalidArgument,
	ResultConsumed,
	ResultState,
)
from .source import SourceHandle

# -----------------------------------------------------------------------------
#
# HELPERS
#
# -----------------------------------------------------------------------------


def contentDisposition(name: str, disposition: str = "attachment") -> str:
	"""Returns a `Content-Disposition` value for the given file name, with
	an RFC 6266 `filename*` parameter when the name isn't plain ASCII."""
	name = name.replace("\r", "").replace("\n", "")
	escaped: str = name.replace("\\", "\\\\").replace('"', '\\"')
	if escaped.isascii():
		return f'{disposition}; filename="{escaped}"'
	else:
		fallback: str = escaped.encode("ascii", "replace").decode("ascii")
		return f"{disposition}; filename=\"{fallback.replace('?', '_')}\"; filename*=UTF-8''{quote(name, safe='')}"


# -----------------------------------------------------------------------------
#
# FILE RESULT
#
# -----------------------------------------------------------------------------


class FileResult(ActionResult):
	"""Represents a result that writes a file to the response. Subclasses
	define where the file comes from by implementing `writeFile`."""

	def __init__(
		self, contentType: str | None = None, *, downloadName: str | None = None
	):
		self.contentType: str | None = contentType
		self.downloadName: str | None = downloadName

	def headers(self) -> dict[str, str | int | None]:
		"""The headers this result adds to the response head."""
		content_type: str = (
			self.contentType
			or (
				guessContentType(self.downloadName) if self.downloadName else None
			)
			or DEFAULT_CONTENT_TYPE
		)
		res: dict[str, str | int | None] = {"Content-Type": content_type}
		if self.downloadName:
			res["Content-Disposition"] = contentDisposition(self.downloadName)
		return res

	async def execute(self, context: ActionContext) -> None:
		context.response.setHeaders(self.headers())
		await context.writer.write(context.response.head())
		await self.writeFile(context.writer, context.cancellation)

	@abstractmethod
	async def writeFile(
		self, writer: HTTPBodyWriter, cancellation: Cancellation | None = None
	) -> None:
		"""Writes the file to the response body."""
		...


# -----------------------------------------------------------------------------
#
# FILE STREAM RESULT
#
# -----------------------------------------------------------------------------


class FileStreamResult(FileResult):
	"""Writes a file from an already open stream to the response body.

	The result takes ownership of the stream: it is released (closed) once
	the body has been written, whether the copy completed, was cancelled or
	failed. The result is single use, executing it a second time raises
	`ResultConsumed`."""

	# Same as the default buffer size of buffered streams
	CHUNK_SIZE: ClassVar[int] = 0x1000

	def __init__(
		self,
		source: Any,
		contentType: str | None = None,
		*,
		downloadName: str | None = None,
	):
		super().__init__(contentType, downloadName=downloadName)
		self.state: ResultState = ResultState.NotStarted
		# Number of bytes appended to the writer so far
		self.written: int = 0
		self._handle: SourceHandle
		self.source = source

	@property
	def source(self) -> Any:
		"""The stream with the file that will be sent back as the response."""
		return self._handle.source

	@source.setter
	def source(self, value: Any) -> None:
		if value is None:
			raise InvalidArgument("FileStreamResult requires a source, got None")
		if self.state is not ResultState.NotStarted:
			raise ResultConsumed(
				f"Can't change the source of a result that is {self.state.name}"
			)
		self._handle = value if isinstance(value, SourceHandle) else SourceHandle(value)

	@property
	def handle(self) -> SourceHandle:
		return self._handle

	async def execute(self, context: ActionContext) -> None:
		# The guard is checked before the head is written, so that a consumed
		# result doesn't send a second head.
		self._ensureNotStarted()
		try:
			await super().execute(context)
		except BaseException as e:
			# The head could not be written, so the copy never started.
			if self.state is ResultState.NotStarted:
				self.state = (
					ResultState.Cancelled
					if isinstance(e, asyncio.CancelledError)
					else ResultState.Failed
				)
				await self._release(e)
			raise

	async def writeFile(
		self, writer: HTTPBodyWriter, cancellation: Cancellation | None = None
	) -> None:
		"""Copies the source to the writer, chunk by chunk. Raises `Cancelled`
		when the cancellation is triggered, read and write errors are
		propagated as-is. The source is released before returning."""
		self._ensureNotStarted()
		signal: Cancellation = cancellation or CANCELLATION_NONE
		handle: SourceHandle = self._handle
		size: int = self.CHUNK_SIZE
		failure: BaseException | None = None
		self.state = ResultState.Copying
		try:
			# NOTE: Chunks are strictly sequential, the next read only starts
			# once the writer has accepted the previous chunk.
			while True:
				if signal.isTriggered():
					raise Cancelled(signal.reason, self.written)
				chunk: bytes = await handle.read(size)
				if not chunk:
					break
				if signal.isTriggered():
					raise Cancelled(signal.reason, self.written)
				await writer.write(chunk)
				self.written += len(chunk)
				logged(debug) and debug(
					"Chunk written", Size=len(chunk), Written=self.written
				)
			self.state = ResultState.Completed
		except (Cancelled, asyncio.CancelledError) as e:
			self.state = ResultState.Cancelled
			failure = e
			raise
		except Exception as e:
			self.state = ResultState.Failed
			failure = e
			raise
		finally:
			await self._release(failure)

	def _ensureNotStarted(self) -> None:
		if self.state is not ResultState.NotStarted:
			raise ResultConsumed(
				f"FileStreamResult is single use, it is already {self.state.name}"
			)

	async def _release(self, failure: BaseException | None) -> None:
		try:
			await self._handle.release()
		except Exception as e:
			# An error while closing must not hide the one being propagated
			if failure is None:
				self.state = ResultState.Failed
				raise
			exception(e, "Could not release source")

	def __str__(self) -> str:
		return f"FileStreamResult({self._handle} {self.state.name} {self.written}b)"


# EOF

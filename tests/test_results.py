import asyncio
from io import BytesIO

import pytest

from actionresults.cancellation import Cancellation
from actionresults.http.writers import BufferBodyWriter
from actionresults.results import (
	Cancelled,
	FileStreamResult,
	InvalidArgument,
	ResultConsumed,
	ResultState,
	SourceHandle,
)

from fakes import (
	AsyncCountingSource,
	CancellingWriter,
	CountingSource,
	FailingWriter,
	payload,
)

CHUNK: int = FileStreamResult.CHUNK_SIZE


def copy(
	result: FileStreamResult,
	writer: BufferBodyWriter,
	cancellation: Cancellation | None = None,
) -> None:
	asyncio.run(result.writeFile(writer, cancellation))


# -----------------------------------------------------------------------------
# Construction
# -----------------------------------------------------------------------------


def test_chunk_size() -> None:
	assert FileStreamResult.CHUNK_SIZE == 4096


def test_none_source_fails_at_construction() -> None:
	with pytest.raises(InvalidArgument):
		FileStreamResult(None)


def test_invalid_argument_is_value_error() -> None:
	with pytest.raises(ValueError):
		FileStreamResult(None, "text/plain")


def test_none_source_fails_on_assignment() -> None:
	source = CountingSource(b"abc")
	result = FileStreamResult(source)
	with pytest.raises(InvalidArgument):
		result.source = None
	# The previous source is kept, and nothing was read
	assert result.source is source
	assert source.reads == []


def test_source_can_be_replaced_before_execution() -> None:
	first = CountingSource(b"first")
	second = CountingSource(b"second")
	result = FileStreamResult(first, "text/plain")
	result.source = second
	writer = BufferBodyWriter()
	copy(result, writer)
	assert writer.value == b"second"
	assert second.closes == 1
	# The replaced source belongs to the caller again
	assert first.closes == 0
	assert first.reads == []


def test_content_type_is_kept_verbatim() -> None:
	result = FileStreamResult(CountingSource(b""), "Text/Weird; charset=x")
	assert result.contentType == "Text/Weird; charset=x"
	assert FileStreamResult(CountingSource(b"")).contentType is None


def test_accepts_a_source_handle() -> None:
	source = CountingSource(b"data")
	handle = SourceHandle(source)
	result = FileStreamResult(handle)
	assert result.handle is handle
	assert result.source is source


# -----------------------------------------------------------------------------
# Copy
# -----------------------------------------------------------------------------


def test_copies_every_byte_in_order() -> None:
	data = payload(3 * CHUNK + 17)
	source = CountingSource(data)
	result = FileStreamResult(source)
	writer = BufferBodyWriter()
	copy(result, writer)
	assert writer.value == data
	assert result.state is ResultState.Completed
	assert result.written == len(data)
	assert source.closes == 1


def test_ten_thousand_bytes_take_three_rounds() -> None:
	data = payload(10_000)
	source = CountingSource(data)
	writer = CancellingWriter(Cancellation(), after=-1)
	result = FileStreamResult(source)
	copy(result, writer)
	assert source.chunks == [4096, 4096, 1808]
	assert writer.chunks == [4096, 4096, 1808]
	assert all(_ == CHUNK for _ in source.reads)
	assert writer.value == data
	assert result.state is ResultState.Completed
	assert source.closes == 1


def test_empty_source_completes() -> None:
	source = CountingSource(b"")
	result = FileStreamResult(source)
	writer = BufferBodyWriter()
	copy(result, writer)
	assert writer.value == b""
	assert result.state is ResultState.Completed
	assert source.closes == 1


def test_async_source() -> None:
	data = payload(CHUNK * 2 + 1)
	source = AsyncCountingSource(data)
	result = FileStreamResult(source)
	writer = BufferBodyWriter()
	copy(result, writer)
	assert writer.value == data
	assert source.chunks == [CHUNK, CHUNK, 1]
	assert source.closes == 1


def test_file_source_is_closed(tmp_path) -> None:
	data = payload(CHUNK + 100)
	path = tmp_path / "data.bin"
	path.write_bytes(data)
	f = open(path, "rb")
	result = FileStreamResult(f, "application/octet-stream")
	assert result.handle.offload is True
	writer = BufferBodyWriter()
	copy(result, writer)
	assert writer.value == data
	assert f.closed


def test_sink_is_appended_not_reset() -> None:
	writer = BufferBodyWriter()
	writer.buffer += b"HEAD:"
	copy(FileStreamResult(BytesIO(b"body")), writer)
	assert writer.value == b"HEAD:body"


# -----------------------------------------------------------------------------
# Cancellation
# -----------------------------------------------------------------------------


def test_cancelled_before_first_chunk() -> None:
	source = CountingSource(payload(10))
	result = FileStreamResult(source)
	writer = BufferBodyWriter()
	cancellation = Cancellation().trigger("client")
	with pytest.raises(Cancelled) as info:
		copy(result, writer, cancellation)
	assert info.value.reason == "client"
	assert info.value.written == 0
	assert writer.value == b""
	assert source.reads == []
	assert result.state is ResultState.Cancelled
	assert source.closes == 1


@pytest.mark.parametrize("k,n", [(1, 3), (2, 3), (1, 5), (4, 5)])
def test_cancelled_after_k_chunks(k: int, n: int) -> None:
	data = payload(n * CHUNK)
	source = CountingSource(data)
	cancellation = Cancellation()
	writer = CancellingWriter(cancellation, after=k)
	result = FileStreamResult(source)
	with pytest.raises(Cancelled) as info:
		copy(result, writer, cancellation)
	assert writer.value == data[: k * CHUNK]
	assert info.value.written == k * CHUNK
	assert result.state is ResultState.Cancelled
	assert source.closes == 1


def test_cancelled_between_read_and_write() -> None:
	cancellation = Cancellation()

	class TriggeringSource(CountingSource):
		def read(self, size: int) -> bytes:
			chunk = super().read(size)
			cancellation.trigger()
			return chunk

	source = TriggeringSource(payload(CHUNK * 2))
	writer = BufferBodyWriter()
	result = FileStreamResult(source)
	with pytest.raises(Cancelled):
		copy(result, writer, cancellation)
	# The chunk read after the trigger is not written
	assert writer.value == b""
	assert source.closes == 1


def test_task_cancellation_releases_source() -> None:
	class BlockingSource(CountingSource):
		async def read(self, size: int) -> bytes:  # type: ignore[override]
			await asyncio.sleep(10)
			return b""

	source = BlockingSource(b"")
	result = FileStreamResult(source)

	async def main() -> None:
		task = asyncio.create_task(result.writeFile(BufferBodyWriter()))
		await asyncio.sleep(0)
		task.cancel()
		with pytest.raises(asyncio.CancelledError):
			await task

	asyncio.run(main())
	assert result.state is ResultState.Cancelled
	assert source.closes == 1


def test_timeout_triggers_cancellation() -> None:
	class SlowSource(CountingSource):
		async def read(self, size: int) -> bytes:  # type: ignore[override]
			await asyncio.sleep(0.01)
			return CountingSource.read(self, size)

	source = SlowSource(payload(CHUNK * 100))
	result = FileStreamResult(source)
	writer = BufferBodyWriter()

	async def main() -> None:
		await result.writeFile(writer, Cancellation.After(0.05))

	with pytest.raises(Cancelled) as info:
		asyncio.run(main())
	assert info.value.reason == "timeout"
	assert 0 < result.written < CHUNK * 100
	assert writer.value == payload(CHUNK * 100)[: result.written]
	assert source.closes == 1


# -----------------------------------------------------------------------------
# Failures
# -----------------------------------------------------------------------------


@pytest.mark.parametrize("m", [1, 2, 3])
def test_sink_failure_on_chunk_m(m: int) -> None:
	data = payload(3 * CHUNK)
	source = CountingSource(data)
	writer = FailingWriter(failOn=m)
	result = FileStreamResult(source)
	with pytest.raises(BrokenPipeError) as info:
		copy(result, writer)
	# The error is propagated as-is
	assert info.value is writer.error
	assert writer.value == data[: (m - 1) * CHUNK]
	assert result.state is ResultState.Failed
	assert source.closes == 1


def test_read_failure_releases_source() -> None:
	source = CountingSource(payload(3 * CHUNK), failOn=2)
	writer = BufferBodyWriter()
	result = FileStreamResult(source)
	with pytest.raises(OSError, match="Read failed"):
		copy(result, writer)
	assert writer.value == payload(CHUNK)
	assert result.state is ResultState.Failed
	assert source.closes == 1


def test_close_failure_does_not_hide_copy_failure() -> None:
	class BadCloseSource(CountingSource):
		def close(self) -> None:
			super().close()
			raise OSError("Close failed")

	source = BadCloseSource(payload(CHUNK))
	result = FileStreamResult(source)
	with pytest.raises(BrokenPipeError):
		copy(result, FailingWriter(failOn=1))
	assert source.closes == 1


def test_close_failure_after_completion_is_raised() -> None:
	class BadCloseSource(CountingSource):
		def close(self) -> None:
			super().close()
			raise OSError("Close failed")

	source = BadCloseSource(b"abc")
	result = FileStreamResult(source)
	writer = BufferBodyWriter()
	with pytest.raises(OSError, match="Close failed"):
		copy(result, writer)
	assert writer.value == b"abc"
	assert result.state is ResultState.Failed
	assert source.closes == 1


# -----------------------------------------------------------------------------
# Single use
# -----------------------------------------------------------------------------


def test_second_execution_is_rejected() -> None:
	source = CountingSource(b"once")
	result = FileStreamResult(source)
	writer = BufferBodyWriter()
	copy(result, writer)
	with pytest.raises(ResultConsumed):
		copy(result, writer)
	assert writer.value == b"once"
	assert source.closes == 1
	assert len(source.reads) == 2


def test_second_execution_after_cancellation_is_rejected() -> None:
	source = CountingSource(b"once")
	result = FileStreamResult(source)
	with pytest.raises(Cancelled):
		copy(result, BufferBodyWriter(), Cancellation().trigger())
	with pytest.raises(ResultConsumed):
		copy(result, BufferBodyWriter())
	assert source.closes == 1


def test_source_cannot_be_replaced_after_execution() -> None:
	result = FileStreamResult(CountingSource(b"x"))
	copy(result, BufferBodyWriter())
	with pytest.raises(ResultConsumed):
		result.source = CountingSource(b"y")


# EOF

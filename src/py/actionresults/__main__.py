import argparse
import asyncio
import sys
from pathlib import Path
from typing import BinaryIO

from .dispatch import execute
from .http.model import HTTPResponse
from .http.writers import FileBodyWriter
from .results.files import FileStreamResult
from .results.model import ResultState
from .utils.logging import error, info, setLevel

EXIT_CODES: dict[ResultState, int] = {
	ResultState.Completed: 0,
	ResultState.Cancelled: 1,
	ResultState.Failed: 2,
}


class BodyOnlyWriter(FileBodyWriter):
	"""Skips the response head, which is the first chunk written."""

	__slots__ = ["skipped"]

	def __init__(self, file: BinaryIO) -> None:
		super().__init__(file)
		self.skipped: bool = False

	async def _writeBytes(self, chunk: bytes) -> bool:
		if not self.skipped:
			self.skipped = True
			return True
		return await super()._writeBytes(chunk)


async def send(
	path: Path,
	*,
	contentType: str | None = None,
	downloadName: str | None = None,
	timeout: float | None = None,
	bodyOnly: bool = False,
) -> ResultState:
	"""Streams the file at `path` as an HTTP response to stdout."""
	out = sys.stdout.buffer
	writer = BodyOnlyWriter(out) if bodyOnly else FileBodyWriter(out)
	# Anything that can fail happens before the file is opened, as the
	# result owns the handle from then on.
	size: int = path.stat().st_size
	response = HTTPResponse(status=200, headers={"Content-Length": str(size)})
	result = FileStreamResult(
		open(path, "rb"), contentType, downloadName=downloadName
	)
	return await execute(result, writer, response=response, timeout=timeout)


def main(args: list[str] | None = None) -> int:
	parser = argparse.ArgumentParser(
		prog="action-results",
		description="Streams a file as an HTTP response to stdout",
		formatter_class=argparse.ArgumentDefaultsHelpFormatter,
	)
	parser.add_argument("path", metavar="PATH", type=Path, help="File to send")
	parser.add_argument(
		"-t", "--content-type", type=str, default=None, help="Content-Type header"
	)
	parser.add_argument(
		"-n",
		"--download-name",
		type=str,
		default=None,
		help="Sends the file as an attachment with the given name",
	)
	parser.add_argument(
		"-T",
		"--timeout",
		type=float,
		default=None,
		help="Cancels the transfer after the given number of seconds",
	)
	parser.add_argument(
		"-b", "--body-only", action="store_true", help="Does not write the head"
	)
	parser.add_argument(
		"-l", "--log-level", type=str, default=None, help="Logging level"
	)
	options = parser.parse_args(args=args)
	if options.log_level:
		setLevel(options.log_level)
	path: Path = options.path
	if not path.is_file():
		parser.error(f"File not found: {path}")
	info("Sending file", Path=str(path), Size=path.stat().st_size)
	try:
		state = asyncio.run(
			send(
				path,
				contentType=options.content_type,
				downloadName=options.download_name,
				timeout=options.timeout,
				bodyOnly=options.body_only,
			)
		)
	except OSError as e:
		error("Transfer failed", e.errno, Path=str(path), Error=str(e))
		state = ResultState.Failed
	return EXIT_CODES[state]


if __name__ == "__main__":
	sys.exit(main())

# EOF

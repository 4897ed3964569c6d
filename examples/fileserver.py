"""
Streaming File Server Example

This demonstrates sending files with `FileStreamResult` over a plain
asyncio stream server.
Features shown:
- The file is copied in chunks, a slow client throttles the reads
- A per-request timeout, layered as a cancellation
- The file is always closed, even when the client goes away

Usage:
    python fileserver.py [DIRECTORY]

Test with:
    curl -v http://localhost:8000/README.md
"""

import asyncio
import sys
from pathlib import Path

from actionresults import AIOStreamBodyWriter, FileStreamResult, HTTPResponse, execute
from actionresults.utils.files import contentType
from actionresults.utils.logging import info, warning

ROOT: Path = Path(sys.argv[1] if len(sys.argv) > 1 else ".").absolute()


async def onClient(reader: asyncio.StreamReader, stream: asyncio.StreamWriter) -> None:
	writer = AIOStreamBodyWriter(stream)
	try:
		line = (await reader.readline()).decode("ascii", "replace").split()
		# We don't care about the request headers
		while (await reader.readline()) not in (b"\r\n", b"\n", b""):
			pass
		path = (ROOT / line[1].lstrip("/")).resolve() if len(line) > 1 else ROOT
		if not path.is_file() or ROOT not in path.parents:
			warning("File not found", Path=str(path))
			await writer.write(
				HTTPResponse(404, headers={"Content-Length": "0"}).head()
			)
			return
		result = FileStreamResult(open(path, "rb"), contentType(path))
		response = HTTPResponse(
			headers={
				"Content-Length": str(path.stat().st_size),
				"Connection": "close",
			}
		)
		await execute(result, writer, response=response, timeout=30.0)
	except (BrokenPipeError, ConnectionResetError):
		info("Client went away")
	finally:
		stream.close()


async def main(port: int = 8000) -> None:
	server = await asyncio.start_server(onClient, "127.0.0.1", port)
	info("Serving files", icon="🚀", Root=str(ROOT), Port=port)
	async with server:
		await server.serve_forever()


if __name__ == "__main__":
	try:
		asyncio.run(main())
	except KeyboardInterrupt:
		info("Stopped")

# EOF

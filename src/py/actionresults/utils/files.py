import mimetypes
from pathlib import Path

mimetypes.init()

MIME_TYPES: dict[str, str] = dict(
	bz2="application/x-bzip",
	gz="application/x-gzip",
	zst="application/zstd",
)


def contentType(name: Path | str, default: str | None = None) -> str | None:
	"""Guesses the content type from the given file name, returning `default`
	when nothing matches."""
	text = str(name)
	ext: str = text.rsplit(".", 1)[-1].lower() if "." in text else ""
	return (
		res
		if (res := MIME_TYPES.get(ext))
		else mimetypes.guess_type(text)[0] or default
	)


# EOF

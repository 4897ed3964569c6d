from .cancellation import Cancellation, CANCELLATION_NONE  # NOQA: F401
from .http.model import HTTPBodyWriter, HTTPResponse  # NOQA: F401
from .http.writers import (
	AIOSocketBodyWriter,
	AIOStreamBodyWriter,
	BufferBodyWriter,
	FileBodyWriter,
)  # NOQA: F401
from .results import (
	ActionContext,
	ActionResult,
	Cancelled,
	FileResult,
	FileStreamResult,
	InvalidArgument,
	ResultConsumed,
	ResultError,
	ResultState,
	SourceHandle,
)  # NOQA: F401
from .dispatch import execute  # NOQA: F401


# EOF

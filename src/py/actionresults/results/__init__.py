from .model import (
	ActionContext,
	ActionResult,
	Cancelled,
	InvalidArgument,
	ResultConsumed,
	ResultError,
	ResultState,
)  # NOQA: F401
from .source import SourceHandle  # NOQA: F401
from .files import FileResult, FileStreamResult, contentDisposition  # NOQA: F401

# EOF

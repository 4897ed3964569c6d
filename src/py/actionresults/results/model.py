from abc import ABC, abstractmethod
from enum import Enum
from typing import NamedTuple

from mypy_extensions import mypyc_attr

from ..cancellation import CANCELLATION_NONE, Cancellation
from ..http.model import HTTPBodyWriter, HTTPResponse

# -----------------------------------------------------------------------------
#
# ERRORS
#
# -----------------------------------------------------------------------------


class ResultError(Exception):
	"""Base class for errors raised by results."""


class InvalidArgument(ResultError, ValueError):
	"""Raised synchronously when a result is given an invalid value, like
	a missing source."""


class ResultConsumed(ResultError, RuntimeError):
	"""Raised when a single-use result is executed (or changed) after it
	started executing."""


class Cancelled(ResultError):
	"""The cancellation signal was triggered before the body was fully
	written. Bytes written before are not rolled back."""

	def __init__(self, reason: str | None = None, written: int = 0):
		super().__init__(
			f"Operation did not complete{f': {reason}' if reason else ''}"
		)
		self.reason: str | None = reason
		self.written: int = written


# -----------------------------------------------------------------------------
#
# DATA MODEL
#
# -----------------------------------------------------------------------------


class ResultState(Enum):
	"""Lifecycle of a result execution"""

	NotStarted = 0
	Copying = 1
	Completed = 2
	Cancelled = 10
	Failed = 11


class ActionContext(NamedTuple):
	"""What the dispatcher hands over to a result when executing it."""

	response: HTTPResponse
	writer: HTTPBodyWriter
	cancellation: Cancellation = CANCELLATION_NONE


# -----------------------------------------------------------------------------
#
# RESULT
#
# -----------------------------------------------------------------------------


@mypyc_attr(allow_interpreted_subclasses=True)
class ActionResult(ABC):
	"""An action result produces the output of an action, once the
	dispatcher decided it's time to send it."""

	@abstractmethod
	async def execute(self, context: ActionContext) -> None: ...


# EOF

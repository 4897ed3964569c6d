import asyncio

from .cancellation import CANCELLATION_NONE, Cancellation, NeverCancelled
from .config import LOG_RESULTS
from .http.model import HTTPBodyWriter, HTTPResponse
from .results.model import ActionContext, ActionResult, Cancelled, ResultError, ResultState
from .utils.logging import event, exception, warning


async def execute(
	result: ActionResult,
	writer: HTTPBodyWriter,
	*,
	response: HTTPResponse | None = None,
	cancellation: Cancellation | None = None,
	timeout: float | None = None,
) -> ResultState:
	"""Executes the result, writing the response head and body using the
	given writer, and returns the terminal state.

	A cancelled result is reported as `ResultState.Cancelled`, while any
	other error is logged and propagated as-is. When `timeout` is given,
	the cancellation (created if needed) is triggered after that many
	seconds. When the body could not be fully written, the writer is
	flagged with `shouldClose`, as the connection can't be reused."""
	res: HTTPResponse = response or HTTPResponse()
	signal: Cancellation
	if timeout is not None and (
		cancellation is None or isinstance(cancellation, NeverCancelled)
	):
		# The shared empty cancellation can't be triggered, so a timeout
		# needs its own signal.
		signal = Cancellation()
	else:
		signal = cancellation or CANCELLATION_NONE
	if timeout is not None:
		signal.timeout(timeout)
	state: ResultState = ResultState.Failed
	try:
		await result.execute(ActionContext(res, writer, signal))
		state = ResultState.Completed
	except Cancelled as e:
		state = ResultState.Cancelled
		writer.shouldClose = True
		warning("Result Cancelled", Reason=e.reason, Written=e.written)
	except asyncio.CancelledError:
		# The task running the result was cancelled, the client most likely
		# went away.
		writer.shouldClose = True
		raise
	except ResultError:
		# Usage errors (consumed result, invalid source) happen before
		# anything is written.
		raise
	except Exception as e:
		writer.shouldClose = True
		exception(e, "Result failed")
		raise
	finally:
		if timeout is not None:
			signal.dispose()
	await writer.flush()
	if LOG_RESULTS:
		event(
			"Result",
			state.name,
			Type=type(result).__name__,
			Status=res.status,
			Written=writer.written,
		)
	return state


# EOF

import asyncio


class Cancellation:
	"""A cooperative cancellation signal. The signal is owned by whoever
	creates it: results only observe it (between chunks), they never
	trigger it."""

	__slots__ = ["reason", "_triggered", "_event", "_timer"]

	@staticmethod
	def After(seconds: float) -> "Cancellation":
		"""Returns a signal that triggers after the given delay. Must be
		called from within a running loop."""
		return Cancellation().timeout(seconds)

	def __init__(self) -> None:
		self.reason: str | None = None
		self._triggered: bool = False
		self._event: asyncio.Event | None = None
		self._timer: asyncio.TimerHandle | None = None

	def isTriggered(self) -> bool:
		return self._triggered

	def trigger(self, reason: str | None = None) -> "Cancellation":
		if not self._triggered:
			self._triggered = True
			self.reason = reason
			if self._event:
				self._event.set()
		self.dispose()
		return self

	def timeout(self, seconds: float) -> "Cancellation":
		"""Schedules the trigger of this signal in `seconds`, replacing any
		previous timeout."""
		self.dispose()
		if not self._triggered:
			loop = asyncio.get_running_loop()
			self._timer = loop.call_later(seconds, self.trigger, "timeout")
		return self

	async def wait(self) -> str | None:
		"""Waits until the signal is triggered, returning its reason."""
		if not self._triggered:
			if self._event is None:
				self._event = asyncio.Event()
			await self._event.wait()
		return self.reason

	def dispose(self) -> None:
		"""Cancels the pending timeout, if any."""
		if self._timer:
			self._timer.cancel()
			self._timer = None

	def __str__(self) -> str:
		return f"Cancellation({'triggered' if self._triggered else 'pending'}{f' {self.reason}' if self.reason else ''})"


class NeverCancelled(Cancellation):
	"""A signal that is never triggered, used when the caller doesn't
	provide one."""

	__slots__: list[str] = []

	def trigger(self, reason: str | None = None) -> "Cancellation":
		raise RuntimeError("The shared empty cancellation can't be triggered")

	def timeout(self, seconds: float) -> "Cancellation":
		raise RuntimeError("The shared empty cancellation can't have a timeout")


CANCELLATION_NONE: Cancellation = NeverCancelled()

# EOF

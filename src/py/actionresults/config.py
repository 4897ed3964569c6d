from os import getenv

# Used when a file result has neither an explicit content type nor a download
# name we can guess from.
DEFAULT_CONTENT_TYPE: str = "application/octet-stream"

# One of `Debug`, `Info`, `Checkpoint`, `Warning`, `Error`, `Exception`,
# `Alert`, `Critical` (see `utils.logging.LogLevel`).
LOG_LEVEL: str = getenv("ACTION_RESULTS_LOG_LEVEL", "Info")

# Logs an event for each executed result in the dispatcher
LOG_RESULTS: bool = getenv("ACTION_RESULTS_LOG", "1") == "1"

# EOF

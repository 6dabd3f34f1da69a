"""Relay error taxonomy."""

NO_FABRICATION_NOTE = (
    "No data is fabricated: results missing from PhantomBuster are reported as absent, "
    "never substituted with invented values."
)


class RelayError(Exception):
    """Base error. `status_code` is used when the error reaches an HTTP caller."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(RelayError):
    """Missing or blank company/title in a search request."""

    status_code = 400


class LaunchError(RelayError):
    """A job launch failed or returned no container id.

    `http_status` holds the upstream status code (None for network errors and
    unrecognized responses) so the launcher can classify retries.
    """

    def __init__(self, message: str, http_status: int | None = None, transport: bool = False):
        super().__init__(message)
        self.http_status = http_status
        self.transport = transport

    @property
    def is_throttling(self) -> bool:
        """Rate-limit or server-side failure that deserves a longer backoff."""
        if self.http_status is None:
            return self.transport
        return self.http_status >= 500 or self.http_status in (408, 429)


class PollError(RelayError):
    """Fetching a job's status failed."""


class WaitTimeoutError(RelayError):
    """The synchronous wait budget ran out before every run finished."""

    status_code = 500


class UnknownBatchError(RelayError):
    """No batch with the requested id."""

    status_code = 404

"""Error taxonomy shared by services and the HTTP layer."""


class CalorieTrackerError(Exception):
    """Base class for expected application errors."""


class ValidationError(CalorieTrackerError):
    """Required caller input is missing or invalid."""


class UpstreamMalformedError(CalorieTrackerError):
    """The completion API returned text that is not a nutrition record."""


class NotAuthenticatedError(CalorieTrackerError):
    """No Google credentials are available."""

    def __init__(self, message: str = "Not authenticated with Google") -> None:
        super().__init__(message)


class NotConfiguredError(CalorieTrackerError):
    """No spreadsheet id is configured."""

    def __init__(self, message: str = "Google Sheets ID not configured") -> None:
        super().__init__(message)


class RemoteStoreError(CalorieTrackerError):
    """The spreadsheet API rejected or failed a request."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthorizationError(CalorieTrackerError):
    """The OAuth provider rejected a code exchange or token refresh."""

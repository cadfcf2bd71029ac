"""Errors raised by the food search pipeline."""


class FoodSearchError(Exception):
    """Base class for food search failures."""


class SourceUnavailableError(FoodSearchError):
    """An external source could not produce results."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source


class NetworkError(SourceUnavailableError):
    """Transport failure talking to a source."""


class ApiError(SourceUnavailableError):
    """A source answered with a non-success status."""

    def __init__(self, source: str, status_code: int) -> None:
        super().__init__(source, f"request failed with status {status_code}")
        self.status_code = status_code


class RateLimitExceededError(FoodSearchError):
    """The local request budget for a source is used up."""

    def __init__(self, source: str, retry_after_ms: int) -> None:
        super().__init__(f"{source}: rate limit reached, retry in {retry_after_ms} ms")
        self.source = source
        self.retry_after_ms = retry_after_ms


class AllSourcesFailedError(FoodSearchError):
    """Both the primary and the fallback source failed."""

    def __init__(
        self, primary_error: Exception | None, fallback_error: Exception
    ) -> None:
        super().__init__(
            f"all sources failed (primary: {primary_error}; fallback: {fallback_error})"
        )
        self.primary_error = primary_error
        self.fallback_error = fallback_error


class InvalidBarcodeError(FoodSearchError, ValueError):
    """Barcode is too short to look up."""

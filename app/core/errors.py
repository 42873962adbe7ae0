"""
Exception taxonomy shared by the AI, geocoding and enrichment services.
"""


class TripPlannerError(Exception):
    """Base class for recoverable external-call failures."""


class ConfigurationMissingError(TripPlannerError):
    """No credential or endpoint is configured for a backend."""


class TransportError(TripPlannerError):
    """Network failure, timeout, non-2xx response or provider error status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ParseError(TripPlannerError):
    """AI output could not be parsed into the itinerary schema."""


class NotFoundError(TripPlannerError):
    """The backend answered but returned zero results."""


class ConflictError(TripPlannerError):
    """A record with the same identifier already exists."""

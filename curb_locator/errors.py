class CurbLocatorError(Exception):
    """Base class for errors reported by the curb locator."""


class InvalidGeocodeError(CurbLocatorError, ValueError):
    """A spot geocode or search address is not a well-formed geocode."""

    def __init__(self, geocode: object, reason: str) -> None:
        self.geocode = geocode
        self.reason = reason
        super().__init__(f"Invalid geocode {geocode!r}: {reason}")


class ProviderFailure(CurbLocatorError):
    """A geocode or distance provider call failed or timed out."""

"""
Exception hierarchy for meshscout.

Every failure is scoped to a single search attempt, so callers (the
Streamlit app, tests) can catch :class:`MeshScoutError` and show its
``message`` as the status line.

Hierarchy::

    MeshScoutError
    ├── InputValidationError      bad postal code, radius, limit or setting
    ├── GeocodingError            geocoder transport / payload failures
    │   └── PostalCodeNotFoundError
    ├── OverpassQueryError        spatial query non-success response
    ├── SearchInProgressError     a search is already running
    └── NoRunError                export requested before any search
"""


class MeshScoutError(Exception):
    """Base exception for all meshscout failures.

    Args:
        message: Human-readable description of the error.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message: str = message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class InputValidationError(MeshScoutError):
    """Raised before any network interaction when search inputs are malformed."""


class GeocodingError(MeshScoutError):
    """Raised when the postal code lookup fails or returns no usable data."""


class PostalCodeNotFoundError(GeocodingError):
    """Raised when the geocoder has no entry for the postal code.

    Args:
        postal_code: The code that was looked up.
    """

    def __init__(self, postal_code: str) -> None:
        super().__init__("ZIP not found")
        self.postal_code: str = postal_code


class OverpassQueryError(MeshScoutError):
    """Raised when the Overpass API does not return a usable response."""


class SearchInProgressError(MeshScoutError):
    """Raised when a search is started while another one is still running."""

    def __init__(self) -> None:
        super().__init__("A search is already in progress.")


class NoRunError(MeshScoutError):
    """Raised when an export is requested before any search completed."""

    def __init__(self) -> None:
        super().__init__("Run a search first to export.")

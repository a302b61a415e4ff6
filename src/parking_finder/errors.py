"""Errors raised by the parking discovery pipeline."""


class DiscoveryError(Exception):
    """Base class for failures that end a discovery cycle."""

    def __init__(self, user_message: str, detail: str | None = None):
        self.user_message = user_message
        self.detail = detail
        super().__init__(detail or user_message)


class InvalidQueryInput(DiscoveryError, ValueError):
    """Search center or radius cannot be turned into a query."""

    def __init__(self, detail: str):
        super().__init__(f"Invalid search location: {detail}", detail)


class TransportFailure(DiscoveryError):
    """The request to the geospatial service failed or timed out."""

    def __init__(self, detail: str):
        super().__init__(f"Failed to load parking data: {detail}", detail)


class DecodeFailure(DiscoveryError):
    """The response body was not the expected JSON shape."""

    def __init__(self, detail: str):
        super().__init__("Failed to parse parking data.", detail)

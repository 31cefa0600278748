"""Exception types raised by the ingestion pipeline."""


class OfferError(RuntimeError):
    """Base class for offer pipeline failures."""


class MalformedPayloadError(OfferError, ValueError):
    """Raised when an inbound payload is not a JSON object."""


class UpstreamError(OfferError):
    """Raised when the marketplace listing call fails."""

"""Domain errors."""


class DigestError(Exception):
    """Base error for digest runs and the feedback service."""


class ConfigurationError(DigestError):
    """A precondition for a run or an endpoint is not met."""


class ValidationError(DigestError):
    """Rejected input, raised before anything is written."""


class DeliveryError(DigestError):
    """The rendered digest could not be delivered."""

"""Exception hierarchy shared across talentmatch."""


class TalentMatchError(Exception):
    """Base class for talentmatch errors."""

    pass


class NotFoundError(TalentMatchError):
    """Raised when a job, candidate, or résumé document does not exist."""

    pass


class ShapeMismatchError(TalentMatchError, ValueError):
    """Raised when two vectors of different lengths are compared."""

    pass


class ProviderError(TalentMatchError):
    """Raised when the embedding or chat provider fails (network, auth, quota)."""

    pass


class ProviderTimeoutError(ProviderError):
    """Raised when a provider call does not finish within its timeout."""

    pass


class MalformedProviderResponseError(TalentMatchError):
    """Raised when provider text cannot be parsed into the expected JSON shape."""

    def __init__(self, message: str, raw_text: str):
        super().__init__(message)
        self.raw_text = raw_text

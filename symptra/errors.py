# symptra/errors.py


class SymptraError(Exception):
    """Base class for errors surfaced by the symptom service."""


class InvalidArgument(SymptraError):
    pass


class NotFound(SymptraError):
    pass


class UpstreamUnavailable(SymptraError):
    """The completion service failed or timed out."""


class MalformedAnalysis(SymptraError):
    """Raised while decoding an analysis block; never leaves analysis.py."""

"""Error taxonomy for ingestion and analysis failures.

Every failure the service reports is an ``AnalysisError``. The API layer
maps ``status_code`` onto the HTTP response and ``str(exc)`` onto the
``error`` field of the body.
"""


class AnalysisError(Exception):
    """Base class for all reported analysis failures."""

    code = "analysis-error"
    status_code = 500


class MissingInputError(AnalysisError):
    """No file or URL was provided."""

    code = "missing-input"
    status_code = 400


class InvalidTypeError(AnalysisError):
    """Uploaded MIME type is not on the allow-list."""

    code = "invalid-type"
    status_code = 400


class PayloadTooLargeError(AnalysisError):
    """Payload exceeds the configured size ceiling."""

    code = "payload-too-large"
    status_code = 400

    def __init__(self, limit_bytes: int) -> None:
        self.limit_bytes = limit_bytes
        super().__init__(f"File too large (max {limit_bytes // (1024 * 1024)} MB)")


class InvalidInputError(AnalysisError):
    """A request field or decoded buffer property is unusable."""

    code = "invalid-input"
    status_code = 400


class FetchError(AnalysisError):
    """Remote audio could not be fetched (network error or non-2xx status)."""

    code = "fetch-failure"
    status_code = 502


class DecodeError(AnalysisError):
    """The codec could not turn the payload into samples."""

    code = "decode-failure"
    status_code = 422


class InsufficientDataError(AnalysisError):
    """Too little audio, or no confirmed beats, to produce a finite tempo."""

    code = "insufficient-data"
    status_code = 422


class DetectorError(AnalysisError):
    """A detector raised while processing a hop."""

    code = "detector-failure"
    status_code = 500

    def __init__(self, feature: str, cause: BaseException) -> None:
        self.feature = feature
        self.cause = cause
        super().__init__(f"{feature.capitalize()} detection failed")


class AnalysisTimeoutError(AnalysisError):
    """The detector passes did not finish within the configured ceiling."""

    code = "timeout"
    status_code = 504

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"Analysis timed out after {timeout:.0f}s")

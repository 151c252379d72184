class WorkoutAIError(Exception):
    """Base class for every failure the service surfaces to a caller."""

    kind = "internal"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(WorkoutAIError):
    """A required credential or endpoint is missing."""

    kind = "configuration"
    status_code = 500


class UpstreamError(WorkoutAIError):
    """A collaborator could not be reached or answered with a failure status."""

    kind = "upstream_unavailable"
    status_code = 502

    def __init__(self, message: str, *, status: int | None = None):
        super().__init__(message)
        self.status = status


class MalformedOutputError(WorkoutAIError):
    """The model answered, but nothing usable came back."""

    kind = "upstream_malformed"
    status_code = 502

    def __init__(self, message: str, *, preview: str | None = None):
        super().__init__(message)
        self.preview = preview


class UnparsableOutputError(MalformedOutputError):
    """Model text does not contain a JSON object."""


class WorkoutValidationError(MalformedOutputError):
    """Parsed model output does not have the shape of a workout."""

    kind = "validation_failed"


class EmailDeliveryError(WorkoutAIError):
    kind = "delivery"
    status_code = 502


class RecipientError(WorkoutAIError):
    """One recipient of the daily batch failed; never raised past the batch."""

    def __init__(self, user_id: str, cause: BaseException):
        super().__init__(str(cause) or type(cause).__name__)
        self.user_id = user_id
        self.cause = cause
        self.kind = getattr(cause, "kind", "unexpected")

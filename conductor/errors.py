"""Domain exception hierarchy for Conductor.

Services and the rebuild coordinator raise these instead of bare
``ValueError`` so that the global exception handler can map each failure
to the correct HTTP status code and a distinct message.
"""


class ConductorError(Exception):
    """Base for all domain exceptions."""

    def __init__(self, message: str = "An unexpected error occurred", *, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class MissingParameterError(ConductorError):
    """A required request parameter was absent or empty (400)."""

    def __init__(self, param: str):
        super().__init__(f"Must provide a '{param}' parameter.", status_code=400)
        self.param = param


class InvalidParameterError(ConductorError):
    """A request parameter was present but could not be parsed (400)."""

    def __init__(self, param: str, raw_value: str):
        super().__init__(f"Invalid '{param}' parameter: {raw_value}", status_code=400)
        self.param = param
        self.raw_value = raw_value


class NotFoundError(ConductorError):
    """Referenced sub-project, build record or master does not exist (404)."""

    def __init__(self, kind: str, identifier: object):
        super().__init__(f"{kind.capitalize()} does not exist: {identifier}", status_code=404)
        self.kind = kind
        self.identifier = identifier


class NotAMemberError(ConductorError):
    """Sub-project exists but is not grouped under this master (409)."""

    def __init__(self, sub_project: str):
        super().__init__(
            f"Not a sub-project of this master project: {sub_project}",
            status_code=409,
        )
        self.sub_project = sub_project


class ConflictError(ConductorError):
    """Resource already exists (409)."""

    def __init__(self, message: str = "Conflict"):
        super().__init__(message, status_code=409)


class AuthError(ConductorError):
    """Authentication or authorization failure (401/403)."""

    def __init__(self, message: str = "Not authorized", *, status_code: int = 401):
        super().__init__(message, status_code=status_code)


def format_error_response(
    *,
    error: str,
    detail: object = None,
    request_id: str = "",
) -> dict:
    """Build a structured error response dict.

    Parameters
    ----------
    error : str
        Short error title (e.g. ``"Internal Server Error"``).
    detail : object
        Human-readable detail string or validation error list.
    request_id : str
        The request ID for tracing.

    Returns
    -------
    dict
        ``{"error": ..., "detail": ..., "request_id": ...}``
    """
    return {
        "error": error,
        "detail": detail if detail is not None else error,
        "request_id": request_id,
    }

"""Error taxonomy for the analysis pipeline.

Every stage raises one of the :class:`PhotolensError` subclasses below.  The
API layer is the single place that turns them into HTTP responses, using
:func:`classify` and :func:`error_body`.

========================  ======  ==========================
Kind                      Status  ``error`` string
========================  ======  ==========================
``InvalidInput``          400     ``Invalid Input``
``Forbidden``             403     ``Access Forbidden``
``MethodNotAllowed``      405     ``Method Not Allowed``
``UpstreamFailure``       500     ``Upstream Failure``
``MalformedOutput``       500     ``Malformed Output``
``InternalError``         500     ``Internal Server Error``
========================  ======  ==========================

The ``error`` string is stable per kind so clients can branch on it.  The
optional ``details`` string is diagnostic free text only.
"""

from __future__ import annotations


class PhotolensError(Exception):
    """Base class for all pipeline failures.

    Attributes:
        kind: Taxonomy name (e.g. ``"InvalidInput"``).
        status_code: HTTP status the API responds with.
        error: Short, stable, client-facing error string.
        details: Optional diagnostic text.
    """

    kind: str = "InternalError"
    status_code: int = 500
    error: str = "Internal Server Error"

    def __init__(self, details: str | None = None) -> None:
        super().__init__(details or self.error)
        self.details = details


class InvalidInput(PhotolensError):
    kind = "InvalidInput"
    status_code = 400
    error = "Invalid Input"


class Forbidden(PhotolensError):
    kind = "Forbidden"
    status_code = 403
    error = "Access Forbidden"


class MethodNotAllowed(PhotolensError):
    kind = "MethodNotAllowed"
    status_code = 405
    error = "Method Not Allowed"


class UpstreamFailure(PhotolensError):
    """The generative model or the upload provider failed or was unreachable."""

    kind = "UpstreamFailure"
    status_code = 500
    error = "Upstream Failure"


class MalformedOutput(PhotolensError):
    """The model reply was not valid JSON or broke the analysis schema."""

    kind = "MalformedOutput"
    status_code = 500
    error = "Malformed Output"


class InternalError(PhotolensError):
    kind = "InternalError"
    status_code = 500
    error = "Internal Server Error"


def classify(exc: BaseException) -> PhotolensError:
    """Map any exception onto the taxonomy.

    Taxonomy errors are returned unchanged; anything else becomes an
    :class:`InternalError` carrying the exception text as details.
    """
    if isinstance(exc, PhotolensError):
        return exc
    return InternalError(f"{exc.__class__.__name__}: {exc}")


def error_body(err: PhotolensError) -> dict[str, str]:
    """Return the JSON body for an error response."""
    body = {"error": err.error}
    if err.details:
        body["details"] = err.details
    return body

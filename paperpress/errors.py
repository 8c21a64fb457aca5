"""
Error kinds raised by the layout engine, the weather collaborators and the
printer drivers.

Each error carries the HTTP status the request handlers answer with.
Absence of a printer is not an error: hardware.create_printer() falls back
to the console driver instead.
"""


class PaperPressError(Exception):
    """Base class for errors that end a print request."""

    status_code = 500

    def __init__(self, detail: str = ""):
        super().__init__(detail)
        self.detail = detail or self.__class__.__name__


class InvalidInput(PaperPressError):
    """The request body or query cannot be printed."""

    status_code = 422


class OversizedTokenError(InvalidInput):
    """A single word is wider than a printed line and can never fit."""

    def __init__(self, token: str, width: int):
        preview = token if len(token) <= 20 else token[:20] + "..."
        super().__init__(
            f"Word '{preview}' is {len(token)} characters; lines hold {width}"
        )
        self.token = token
        self.width = width


class LocationNotFound(PaperPressError):
    """Geocoding returned no match for the requested location."""

    status_code = 404


class UpstreamUnavailable(PaperPressError):
    """The geocoding or weather service failed or answered garbage."""

    status_code = 502


class OutputFinishFailure(PaperPressError):
    """The final cut failed, so the printed document may be incomplete."""

    status_code = 500

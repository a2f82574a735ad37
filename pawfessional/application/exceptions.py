class PawfessionalError(RuntimeError):
    """Base class for every error surfaced to the presentation layer."""

    title = "Error"


class SelectionRequired(PawfessionalError):
    """Raised when the wizard cannot advance because a required choice is missing."""

    title = "Selection Required"


class FetchError(PawfessionalError):
    """Raised when a read from the server (pets, appointments, events) fails."""

    pass


class ValidationError(PawfessionalError):
    """Raised when the server rejects a payload with a structured message."""

    title = "Booking Error"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ServerError(PawfessionalError):
    """Raised on a non-2xx response whose body cannot be parsed."""

    title = "Booking Error"

    def __init__(self, status_code: int) -> None:
        super().__init__(f"Server returned an invalid response. Status: {status_code}")
        self.status_code = status_code


class NetworkError(PawfessionalError):
    """Raised when a request cannot complete (connectivity, timeout)."""

    def __init__(self, message: str = "Unable to connect to server. Please check your connection and try again.") -> None:
        super().__init__(message)


class AuthenticationError(PawfessionalError):
    title = "Login Failed"


class FormError(PawfessionalError):
    """Local form validation failure; `errors` maps field name to message."""

    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__(next(iter(errors.values()), "Invalid form."))
        self.errors = dict(errors)

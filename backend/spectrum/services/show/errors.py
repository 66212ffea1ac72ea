class ShowError(Exception):
    """Base class for rejected show commands.

    Every failure is local to the command that raised it; callers fix the
    request and resubmit. ``status_code`` is the HTTP status the API answers
    with.
    """

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidState(ShowError):
    """Command is not legal in the show's current lifecycle state"""

    status_code = 409


class NotFound(ShowError):
    """Referenced turn or phase does not exist"""

    status_code = 404


class ValidationFailure(ShowError):
    """Command arguments are out of range or malformed"""

    status_code = 400

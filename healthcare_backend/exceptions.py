class AppError(Exception):
    """Base for errors rendered as {"error", "message"[, "details"]}."""

    status_code = 500

    def __init__(self, error: str, message: str, details: list = None):
        self.error = error
        self.message = message
        self.details = details
        super().__init__(f"{error}: {message}")

    def to_dict(self) -> dict:
        body = {"error": self.error, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationFailed(AppError):
    status_code = 400

    def __init__(self, details: list, message: str = "One or more fields are invalid"):
        super().__init__("Validation failed", message, details)


class Unauthenticated(AppError):
    status_code = 401


class NotFoundOrForbidden(AppError):
    """Raised for records that are missing OR not owned by the caller.

    The two cases are intentionally indistinguishable so that callers cannot
    learn about the existence of records they are not allowed to see.
    """

    status_code = 404


class Conflict(AppError):
    status_code = 409


class InternalError(AppError):
    status_code = 500

    def __init__(self, error: str = "Internal server error", message: str = "Internal server error"):
        super().__init__(error, message)

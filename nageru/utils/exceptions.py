from typing import Optional


class NageruError(Exception):
    """Base class for every error nageru reports to the user."""
    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.message = message
        self.cause = cause
        super().__init__(message)

    def __str__(self):
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


class ConfigIOError(NageruError):
    """Raised when the config directory or file cannot be created, read or written."""
    def __init__(self, path, cause: Optional[BaseException] = None, action: str = 'access'):
        self.path = path
        super().__init__(f"Failed to {action} config file {path}", cause)


class ConfigValidationError(NageruError):
    """Raised when a config file does not parse as a valid config record."""
    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid config {path}: {reason}")


class InputIOError(NageruError):
    """Raised when the upload source cannot be buffered, archived or opened."""
    def __init__(self, path, cause: Optional[BaseException] = None, action: str = 'read'):
        self.path = path
        super().__init__(f"Failed to {action} {path}", cause)


class UploadError(NageruError):
    """Raised when Slack rejects the upload or cannot be reached."""
    def __init__(self, method: str, error: str):
        self.method = method
        self.error = error
        super().__init__(f"Slack API {method} failed: {error}")

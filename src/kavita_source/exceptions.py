"""Custom exceptions for the kavita-source adapter."""


class KavitaError(Exception):
    """Base exception for all kavita-source errors."""

    def __init__(self, message: str = "An error occurred talking to Kavita") -> None:
        self.message = message
        super().__init__(self.message)


class ConfigurationError(KavitaError):
    """Raised when the server URL or API key has not been configured."""

    def __init__(self, message: str = "Kavita is not configured. Run 'kavita configure' first.") -> None:
        super().__init__(message)


class AuthenticationError(KavitaError):
    """Raised when login or token refresh is rejected by the server."""

    def __init__(self, message: str = "Unable to log into kavita") -> None:
        super().__init__(message)


class ParseError(KavitaError):
    """Raised when a response body or token cannot be decoded."""

    def __init__(self, message: str = "Failed to parse response from kavita.") -> None:
        super().__init__(message)


class InvalidPathError(ParseError):
    """Raised when a composite novel or chapter path is malformed."""

    def __init__(self, path: str | None = None, expected: int | None = None) -> None:
        if path is not None and expected is not None:
            message = f"Invalid path '{path}': expected {expected} '/'-separated segments"
        elif path is not None:
            message = f"Invalid path '{path}'"
        else:
            message = "Invalid path"
        super().__init__(message)
        self.path = path

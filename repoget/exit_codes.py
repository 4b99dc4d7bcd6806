"""
Standard exit codes and error types for repoget commands.

Following Unix/POSIX conventions for command-line tools.
"""
from typing import Optional, Sequence

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
NO_REPOS_FOUND = 64      # No local repository matched the query
INVALID_REFERENCE = 65   # Reference could not be turned into a URL
INVALID_REPOSITORY = 66  # URL does not name a repository on its host
BACKEND_ERROR = 67       # VCS backend could not be detected or is unsupported
CONFLICT = 68            # Destination path is occupied
COMMAND_FAILED = 69      # A VCS command exited non-zero or was not found
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'PermissionError': GENERAL_ERROR,
    'ConnectionError': BACKEND_ERROR,
    'ValueError': INVALID_REFERENCE,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: Exception) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    if isinstance(exc, CommandError):
        return exc.exit_code
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class NoReposFoundError(CommandError):
    """Raised when no local repository matches the given name."""
    def __init__(self, message: str = "No repository found"):
        super().__init__(message, NO_REPOS_FOUND)


class InvalidReferenceError(CommandError):
    """Raised when a reference cannot be normalized into a URL."""
    def __init__(self, reference: str, cause: str):
        super().__init__(f"could not parse URL {reference!r}: {cause}", INVALID_REFERENCE)
        self.reference = reference


class InvalidRepositoryError(CommandError):
    """Raised when a URL fails its host's repository check."""
    def __init__(self, url: str):
        super().__init__(f"not a valid repository: {url}", INVALID_REPOSITORY)
        self.url = url


class BackendUndetectableError(CommandError):
    """Raised when every VCS auto-detection attempt failed."""
    def __init__(self, url: str, cause: Optional[Exception] = None):
        message = f"unsupported VCS, url={url}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message, BACKEND_ERROR)
        self.url = url


class NoImportMetaFoundError(CommandError):
    """Raised when a go-import lookup returned no usable meta tag."""
    def __init__(self, url: str = ""):
        message = "no go-import meta tags detected"
        if url:
            message += f" at {url}"
        super().__init__(message, BACKEND_ERROR)
        self.url = url


class UnsupportedOperationError(CommandError):
    """Raised when a backend cannot honour the requested operation."""
    def __init__(self, message: str):
        super().__init__(message, BACKEND_ERROR)


class DestinationConflictError(CommandError):
    """Raised when the local destination is occupied by something unexpected."""
    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}", CONFLICT)
        self.path = path


class SubprocessFailureError(CommandError):
    """
    Raised when an external command fails.

    Keeps the argv so the failing VCS invocation can be reported.
    """
    def __init__(self, argv: Sequence[str], returncode: Optional[int] = None,
                 not_found: bool = False, cause: Optional[str] = None):
        self.argv = list(argv)
        self.returncode = returncode
        self.not_found = not_found
        command = self.argv[0] if self.argv else "<empty>"
        if not_found:
            detail = f"executable file not found: {cause or command}"
        elif cause:
            detail = cause
        else:
            detail = f"exit status {returncode}"
        super().__init__(f"{command}: {detail} ({' '.join(self.argv)})", COMMAND_FAILED)



class UsageError(CommandError):
    """Raised when options are combined in a way that makes no sense."""
    def __init__(self, message: str):
        super().__init__(message, USAGE_ERROR)

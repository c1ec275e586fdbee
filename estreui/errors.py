"""
Exception hierarchy for the EstreUI CLI.

NotFound and FormatMismatch failures are skippable: workflows warn and carry
on. Sync I/O failures and package manager failures are fatal to the command.
"""


class EstreUIError(Exception):
    """Base exception for EstreUI CLI errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class AssetNotFoundError(EstreUIError):
    """Raised when a source asset or library entry file cannot be found."""

    pass


class CorePackageNotFoundError(AssetNotFoundError):
    """Raised when the estreui core package is not installed anywhere we look."""

    pass


class FormatMismatchError(EstreUIError):
    """Raised when a document does not contain the declaration shape we patch."""

    pass


class AssetSyncError(EstreUIError):
    """Raised when copying or writing project files fails."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(message)


class PackageManagerError(EstreUIError):
    """Raised when an npm invocation fails."""

    def __init__(self, message: str, stderr: str = ""):
        self.stderr = stderr
        super().__init__(message)


class DevServerError(EstreUIError):
    """Raised when the development server cannot start."""

    def __init__(self, message: str, hints: list[str] | None = None):
        self.hints = hints or []
        super().__init__(message)

"""
Centralized exception hierarchy for gox.

Fatal errors abort a run before any build is dispatched. CompileError is
the only kind that stays local to a single build unit.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class GoxError(Exception):
    """Base exception for all gox errors."""

    pass


# ============================================================================
# Toolchain Exceptions
# ============================================================================


class ToolchainError(GoxError):
    """Base exception for Go toolchain errors."""

    pass


class MissingToolchainError(ToolchainError):
    """Raised when the Go command cannot be found on the PATH."""

    def __init__(self, command: str):
        self.command = command
        super().__init__(f"{command} executable must be on the PATH")


class InvalidVersionError(ToolchainError):
    """Raised when a toolchain version string cannot be parsed."""

    def __init__(self, version: str, reason: str = ""):
        self.version = version
        msg = f"Invalid toolchain version: {version!r}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class PackageDiscoveryError(ToolchainError):
    """Raised when the packages to build cannot be listed."""

    pass


class CompileError(ToolchainError):
    """Raised when a single go build invocation fails."""

    def __init__(self, message: str, stderr: str = ""):
        self.stderr = stderr
        if stderr:
            message = f"{message}\nStderr: {stderr.strip()}"
        super().__init__(message)


# ============================================================================
# Input Exceptions
# ============================================================================


class InvalidInputError(GoxError):
    """Base exception for invalid invocation inputs."""

    pass


class InvalidFilterTokenError(InvalidInputError):
    """Raised when an OS, Arch or OS/Arch filter token cannot be parsed."""

    def __init__(self, token: str, reason: str = ""):
        self.token = token
        msg = f"Invalid platform filter: {token!r}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class InvalidTemplateError(InvalidInputError):
    """Raised when the output path template cannot be rendered."""

    pass


class EmptyPlatformSetError(InvalidInputError):
    """Raised when the platform filters resolve to nothing."""

    def __init__(self):
        super().__init__(
            "No valid platforms to build for. If you specified a value "
            "for the 'os', 'arch', or 'osarch' flags, make sure you're "
            "using a valid value."
        )


class ConfigError(InvalidInputError):
    """Configuration file parsing or validation error."""

    pass

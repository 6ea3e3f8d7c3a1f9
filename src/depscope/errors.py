"""Exception hierarchy for depscope."""

from typing import Optional


class DepscopeError(Exception):
    """Base class for all depscope errors."""


# ── Manifest parsing ──────────────────────────────────────────────────────

class FileProcessingError(DepscopeError):
    """A manifest could not be read or parsed."""


class UnsupportedFileTypeError(DepscopeError):
    """No registered manifest parser matches the file name."""

    def __init__(self, filename: str) -> None:
        super().__init__(f"Unsupported file type: {filename}")
        self.filename = filename


# ── Dependency resolution ─────────────────────────────────────────────────

class EcosystemUnknownError(DepscopeError):
    """A package carries no ecosystem tag, so no registry can be chosen."""

    def __init__(self, package_name: Optional[str] = None) -> None:
        super().__init__(
            f"Ecosystem unknown for package: {package_name or '[unnamed package]'}"
        )
        self.package_name = package_name


class ResolverNotFoundError(DepscopeError):
    """No resolver is registered for an ecosystem."""

    def __init__(self, ecosystem: str) -> None:
        super().__init__(f"No resolver registered for ecosystem: {ecosystem}")
        self.ecosystem = ecosystem


class SelfDependencyError(DepscopeError):
    """An edge would point from a package to itself."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Package cannot depend on itself: {key}")
        self.key = key


# ── Network creation ──────────────────────────────────────────────────────

class NetworkCreationError(DepscopeError):
    """Building the package network failed; wraps the underlying cause."""

    def __init__(self, stage: str, cause: BaseException) -> None:
        super().__init__(f"Failed to create package network at {stage}: {cause}")
        self.stage = stage
        self.cause = cause

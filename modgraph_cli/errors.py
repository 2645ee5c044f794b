"""Exceptions raised by the workspace resolvers."""

from __future__ import annotations


class ModGraphError(Exception):
    """Base class for every error surfaced to callers."""


class NoManifestError(ModGraphError):
    """The workspace has no readable module manifest."""

    def __init__(self, message: str = "no go.mod files found in view"):
        super().__init__(message)


class PackageNotFoundError(ModGraphError):
    """The requested package is absent from the metadata graph."""

    def __init__(self, package_path: str):
        self.package_path = package_path
        super().__init__(f"package not found: {package_path}")


class InvalidRequestError(ModGraphError):
    """The caller broke an operation's input contract."""


class ManifestParseError(ModGraphError):
    """A manifest could not be parsed."""

    def __init__(self, path: str, line: int, message: str):
        self.path = path
        self.line = line
        super().__init__(f"{path}:{line}: {message}")


class BackendError(ModGraphError):
    """The build toolchain failed to produce workspace metadata."""

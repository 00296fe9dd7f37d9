"""Error taxonomy shared by the store, edit protocol, and actions."""

from __future__ import annotations


class DocumentReadError(OSError):
    """A backing JSON document could not be read, parsed, or written."""


class SchemaValidationError(ValueError):
    """A document or record does not conform to its schema."""

    def __init__(self, message: str, *, issues: list[str] | None = None) -> None:
        self.issues = list(issues or [])
        if self.issues:
            message = message + ":\n" + "\n".join(f"  - {issue}" for issue in self.issues)
        super().__init__(message)


class DomainInvariantError(ValueError):
    """A cross-entity rule (job/project references, name uniqueness) was violated."""


class AbortError(Exception):
    """The user cancelled a single edit."""


class UserExit(Exception):
    """The user asked to leave the main menu."""


class EditorLaunchError(RuntimeError):
    """The configured editor command could not be started."""


class ConfigError(ValueError):
    """The persisted configuration is invalid or points at missing files."""

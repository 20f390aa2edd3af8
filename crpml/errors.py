"""Exception hierarchy for crpml.

Every failure in a scaffold run is terminal.  The CLI catches ``CrpmlError``
and reports its message; anything else (including exceptions raised from
inside a custom merger) propagates as-is.
"""

from __future__ import annotations


class CrpmlError(Exception):
    """Base class for every error crpml raises on purpose."""


class ConfigError(CrpmlError):
    """Raised when the ``.crpml`` workspace configuration is missing or invalid."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors: list[str] = errors or []


class TemplateDefinitionError(CrpmlError):
    """Raised when a template or one of its variants cannot be loaded.

    Attributes:
        template_id: Directory name of the offending template.
        variant_id: Offending variant, when the problem is variant-specific.
        errors: Individual schema violations, if any.
    """

    def __init__(
        self,
        template_id: str,
        message: str,
        *,
        variant_id: str | None = None,
        errors: list[str] | None = None,
    ) -> None:
        self.template_id = template_id
        self.variant_id = variant_id
        self.errors: list[str] = errors or []
        if variant_id is not None:
            label = f"variant `{variant_id}` for template `{template_id}`"
        else:
            label = f"template `{template_id}`"
        super().__init__(f"Invalid {label}: {message}")


class MergeConfigurationError(CrpmlError):
    """Raised when an output path cannot be merged with the declared configuration."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(message)


class CustomMergerError(MergeConfigurationError):
    """Raised when a custom merger cannot be loaded or returns a malformed result."""

    def __init__(
        self,
        merger: str,
        message: str,
        *,
        path: str = "",
        errors: list[str] | None = None,
    ) -> None:
        self.merger = merger
        self.errors: list[str] = errors or []
        super().__init__(path, f"Invalid custom merger `{merger}`: {message}")


class DestinationExistsError(CrpmlError):
    """Raised before any write when the output directory is already present."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Output directory already exists: `{path}`")


class InstallError(CrpmlError):
    """Raised when the package manager exits with a non-zero status."""

    def __init__(self, package_manager: str, returncode: int) -> None:
        self.package_manager = package_manager
        self.returncode = returncode
        super().__init__(f"`{package_manager} install` failed with exit code {returncode}")


class AnswerError(CrpmlError):
    """Raised when an answer supplied on the command line is not acceptable."""

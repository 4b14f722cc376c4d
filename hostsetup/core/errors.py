"""Failure taxonomy for the provisioning pipeline.

Every fatal failure maps to a distinct process exit code so calling automation
can tell causes apart without parsing output.
"""

from __future__ import annotations


class ProvisionError(Exception):
    exit_code = 1

    def __init__(self, message: str = "", *, diagnostic: str = "") -> None:
        super().__init__(message or self.__class__.__name__)
        self.diagnostic = diagnostic

    @property
    def kind(self) -> str:
        return self.__class__.__name__


class ConfigWriteFailure(ProvisionError):
    exit_code = 10


class PackageIndexFailure(ProvisionError):
    exit_code = 11


class PackageInstallFailure(ProvisionError):
    exit_code = 12


class FilesystemFailure(ProvisionError):
    exit_code = 13


class SourceAlreadyExists(ProvisionError):
    exit_code = 14


class CloneFailure(ProvisionError):
    exit_code = 15


class BuildFailure(ProvisionError):
    exit_code = 16


class BootConfigFailure(ProvisionError):
    exit_code = 17


class PrivilegeDenied(ProvisionError):
    exit_code = 18


class RebootDeclined(ProvisionError):
    exit_code = 19


class RebootFailure(ProvisionError):
    exit_code = 20


class PipelineDefinitionError(ValueError):
    """Raised when a pipeline fails static validation."""

    def __init__(self, problems: list[str]) -> None:
        super().__init__("Invalid pipeline:\n" + "\n".join(f"  - {p}" for p in problems))
        self.problems = list(problems)


class ConfigError(ValueError):
    """Raised for an unreadable or invalid configuration."""


USAGE_EXIT_CODE = 2

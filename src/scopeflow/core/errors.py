"""Exceptions raised by the workflow core."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .validator.validate import ValidationResult


class ScopeflowError(Exception):
    pass


class WorkflowParseError(ScopeflowError, ValueError):
    """Workflow JSON does not match the authoring model."""


class ContractCompileError(ScopeflowError, ValueError):
    """Compiler was asked to lower something the target contract cannot express."""


class WorkflowValidationError(ScopeflowError):
    def __init__(self, result: ValidationResult) -> None:
        super().__init__(result.error)
        self.result = result

    @property
    def warnings(self) -> list[str]:
        return self.result.warnings

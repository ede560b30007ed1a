"""Workflow → worker contract.

Two contract versions are derivable from the same authoring tree:

- 1: flat contract (one scope per phase, flat field list)
- 2: nested contract (full scope recursion, ``schema_version: 2``)

``compile_workflow`` trusts its input; ``compile_checked`` is the submission
path and refuses workflows that fail validation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from ...config.settings import settings
from ..errors import ContractCompileError, WorkflowValidationError
from ..ir.model import ScrapingWorkflow
from ..validator.validate import validate_workflow
from .flat import compile_flat
from .nested import compile_nested

logger = logging.getLogger(__name__)

COMPILERS: dict[int, Callable[[ScrapingWorkflow], dict[str, Any]]] = {
    1: compile_flat,
    2: compile_nested,
}

SUPPORTED_SCHEMA_VERSIONS = tuple(sorted(COMPILERS))


@dataclass
class CompiledWorkflow:
    schema_version: int
    contract: dict[str, Any]
    warnings: list[str] = field(default_factory=list)


def resolve_schema_version(schema_version: int | None) -> int:
    version = settings.default_schema_version if schema_version is None else schema_version
    if version not in COMPILERS:
        raise ContractCompileError(
            f"Unsupported contract schema_version {version}; "
            f"expected one of {list(SUPPORTED_SCHEMA_VERSIONS)}"
        )
    return version


def compile_workflow(
    workflow: ScrapingWorkflow, schema_version: int | None = None
) -> dict[str, Any]:
    return COMPILERS[resolve_schema_version(schema_version)](workflow)


def compile_checked(
    workflow: ScrapingWorkflow, schema_version: int | None = None
) -> CompiledWorkflow:
    version = resolve_schema_version(schema_version)
    result = validate_workflow(workflow)
    if not result.ok:
        raise WorkflowValidationError(result)
    for warning in result.warnings:
        logger.info(f"Workflow warning: {warning}")
    return CompiledWorkflow(
        schema_version=version,
        contract=COMPILERS[version](workflow),
        warnings=list(result.warnings),
    )

"""Legacy flat worker contract (schema version 1).

One scope per phase; the scope's repeater steps are projected into a flat
``fields`` list of ``{name, selector, type}`` records.
"""

from __future__ import annotations

import logging
from typing import Any

from ..errors import ContractCompileError
from ..ir.model import (
    DataExtractStep,
    DocumentUrlStep,
    DownloadFileStep,
    PhaseConfig,
    RepeaterStep,
    ScrapingWorkflow,
    SourceUrlStep,
)
from ..tree.ops import flatten_scopes
from ..validator.validate import DISCOVERY_PHASE, processing_phase_name
from .common import compile_before_actions, url_type_key

logger = logging.getLogger(__name__)


def compile_fields(step: RepeaterStep) -> list[dict[str, Any]]:
    if isinstance(step, SourceUrlStep):
        return [{"name": "source_url", "selector": step.selector, "type": "href"}]
    if isinstance(step, DownloadFileStep):
        fields = [{"name": "file_url", "selector": step.url_selector, "type": "href"}]
        if step.filename_selector.strip():
            fields.append({"name": "file_name", "selector": step.filename_selector, "type": "text"})
        return fields
    if isinstance(step, DataExtractStep):
        return [{"name": step.key, "selector": step.selector, "type": step.extract_type}]
    if isinstance(step, DocumentUrlStep):
        # The flat worker has no document field; documents need the nested contract.
        return []
    raise ContractCompileError(f"Unsupported repeater step: {step!r}")


def compile_phase(phase: PhaseConfig, phase_name: str) -> dict[str, Any]:
    scopes = flatten_scopes(phase.chain)
    if len(scopes) > 1:
        raise ContractCompileError(
            f"{phase_name} contains {len(scopes)} scopes; the flat worker contract "
            "supports a single scope per phase. Use schema_version 2."
        )

    scope = scopes[0] if scopes else None
    repeater = scope.repeater if scope is not None else None
    fields: list[dict[str, Any]] = []
    if repeater is not None:
        for step in repeater.steps:
            fields.extend(compile_fields(step))

    pagination = None
    if scope is not None and scope.pagination is not None:
        pagination = {
            "selector": scope.pagination.css_selector,
            "max_pages": scope.pagination.max_pages,
        }

    return {
        "before": compile_before_actions(phase.before),
        "scope": (scope.css_selector.strip() or None) if scope is not None else None,
        "repeater": (repeater.css_selector.strip() or None) if repeater is not None else None,
        "fields": fields,
        "pagination": pagination,
    }


def compile_flat(workflow: ScrapingWorkflow) -> dict[str, Any]:
    processing = []
    for url_type in workflow.url_types:
        processing.append(
            {
                "url_type": url_type_key(url_type.name, url_type.id),
                **compile_phase(url_type.processing, processing_phase_name(url_type.name)),
            }
        )
    out = {
        "playwright": workflow.playwright_enabled,
        "discovery": compile_phase(workflow.discovery, DISCOVERY_PHASE),
        "processing": processing,
    }
    logger.debug(f"Compiled flat contract with {len(processing)} processing phase(s)")
    return out

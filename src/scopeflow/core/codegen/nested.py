"""Nested worker contract (schema version 2).

Keeps the full scope recursion; every scope compiles to
``{selector, label, repeater, pagination, children}``.
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
    Repeater,
    RepeaterStep,
    ScopeModule,
    ScrapingWorkflow,
    SourceUrlStep,
)
from ..tree.ops import flatten_scopes
from .common import compile_before_actions, resolve_url_type_name, url_type_key

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 2

# Worker reads the file name from the matched element itself.
SELF_SELECTOR = "self"


def _filename_or_self(selector: str) -> str:
    return selector.strip() or SELF_SELECTOR


def compile_step(step: RepeaterStep, workflow: ScrapingWorkflow) -> dict[str, Any]:
    if isinstance(step, SourceUrlStep):
        return {
            "type": "source_url",
            "selector": step.selector,
            "url_type": resolve_url_type_name(workflow, step.url_type_id),
        }
    if isinstance(step, DocumentUrlStep):
        return {
            "type": "document_url",
            "selector": step.selector,
            "filename_selector": _filename_or_self(step.filename_selector),
        }
    if isinstance(step, DownloadFileStep):
        out = {
            "type": "download_file",
            "url_selector": step.url_selector,
            "filename_selector": _filename_or_self(step.filename_selector),
        }
        if step.file_type_hint.strip():
            out["file_type_hint"] = step.file_type_hint.strip()
        return out
    if isinstance(step, DataExtractStep):
        return {
            "type": "data_extract",
            "key": step.key,
            "extract": step.extract_type,
            "selector": step.selector,
        }
    raise ContractCompileError(f"Unsupported repeater step: {step!r}")


def _compile_repeater(repeater: Repeater, workflow: ScrapingWorkflow) -> dict[str, Any]:
    return {
        "selector": repeater.css_selector,
        "label": repeater.label,
        "steps": [compile_step(s, workflow) for s in repeater.steps],
    }


def compile_scope(scope: ScopeModule, workflow: ScrapingWorkflow) -> dict[str, Any]:
    return {
        "selector": scope.css_selector,
        "label": scope.label,
        "repeater": (
            _compile_repeater(scope.repeater, workflow) if scope.repeater is not None else None
        ),
        "pagination": (
            {"selector": scope.pagination.css_selector, "max_pages": scope.pagination.max_pages}
            if scope.pagination is not None
            else None
        ),
        "children": [compile_scope(child, workflow) for child in scope.children],
    }


def compile_phase(phase: PhaseConfig, workflow: ScrapingWorkflow) -> dict[str, Any]:
    return {
        "before": compile_before_actions(phase.before),
        "chain": [compile_scope(scope, workflow) for scope in phase.chain],
    }


def compile_nested(workflow: ScrapingWorkflow) -> dict[str, Any]:
    out = {
        "schema_version": SCHEMA_VERSION,
        "playwright": workflow.playwright_enabled,
        "discovery": compile_phase(workflow.discovery, workflow),
        "processing": [
            {
                "url_type": url_type_key(u.name, u.id),
                **compile_phase(u.processing, workflow),
            }
            for u in workflow.url_types
        ],
    }
    logger.debug(
        f"Compiled nested contract: {len(flatten_scopes(workflow.discovery.chain))} "
        f"discovery scope(s), {len(workflow.url_types)} processing phase(s)"
    )
    return out

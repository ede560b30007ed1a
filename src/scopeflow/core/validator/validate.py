"""Structural validation of a workflow before it is compiled.

Rules are checked in a fixed order and the first failing rule wins, so the
operator sees one actionable message at a time. Warnings never block
compilation.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..ir.model import (
    EXTRACT_TYPES,
    DataExtractStep,
    DocumentUrlStep,
    DownloadFileStep,
    Evaluate,
    PhaseConfig,
    RepeaterStep,
    ScrapingWorkflow,
    SourceUrlStep,
    action_has_selector,
    is_playwright_action,
)
from ..tree.ops import flatten_scopes, phase_steps

DISCOVERY_PHASE = "Discovery"


@dataclass
class ValidationResult:
    error: str | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


def processing_phase_name(url_type_name: str) -> str:
    return f"Processing ({url_type_name})"


def _named_phases(workflow: ScrapingWorkflow) -> list[tuple[str, PhaseConfig]]:
    return [(DISCOVERY_PHASE, workflow.discovery)] + [
        (processing_phase_name(u.name), u.processing) for u in workflow.url_types
    ]


def _has_selector(step: RepeaterStep, kind: type) -> bool:
    return isinstance(step, kind) and bool(step.selector.strip())


def _check_structure(phase: PhaseConfig) -> str | None:
    for scope in flatten_scopes(phase.chain):
        if not scope.css_selector.strip():
            return "Every scope must have a CSS selector."
        if scope.repeater is not None and not scope.repeater.css_selector.strip():
            return "Every repeater must have a CSS selector."
        if scope.pagination is not None and not scope.pagination.css_selector.strip():
            return "Pagination must have a CSS selector."
    return None


def _check_step(step: RepeaterStep, url_type_ids: set[str]) -> str | None:
    if isinstance(step, SourceUrlStep):
        if not step.selector.strip():
            return "source_url step requires a selector."
        if step.extract_type != "href":
            return "source_url step must use extract_type=href."
        if step.url_type_id and step.url_type_id not in url_type_ids:
            return "source_url step references an unknown URL type."
    elif isinstance(step, DocumentUrlStep):
        if not step.selector.strip():
            return "document_url step requires a selector."
    elif isinstance(step, DownloadFileStep):
        if not step.url_selector.strip():
            return "download_file step requires url_selector."
    elif isinstance(step, DataExtractStep):
        if not step.key.strip() or not step.selector.strip():
            return "data_extract step requires key and selector."
        if step.extract_type not in EXTRACT_TYPES:
            return "data_extract supports only extract_type text or href."
    return None


def _check_before(name: str, phase: PhaseConfig, playwright_enabled: bool) -> str | None:
    if not playwright_enabled and any(is_playwright_action(a) for a in phase.before):
        return f"{name} contains Playwright actions but Playwright mode is disabled."
    for action in phase.before:
        if action_has_selector(action) and not action.css_selector.strip():
            return f"{name}: action {action.type} requires a CSS selector."
        if isinstance(action, Evaluate) and not action.script.strip():
            return f"{name}: action evaluate requires a script."
    return None


def validate_workflow(workflow: ScrapingWorkflow) -> ValidationResult:
    if len(workflow.url_types) < 1:
        return ValidationResult(error="At least one URL type must exist.")

    url_type_ids = {u.id for u in workflow.url_types}
    discovery_steps = phase_steps(workflow.discovery)
    has_source_urls = any(_has_selector(s, SourceUrlStep) for s in discovery_steps)
    has_document_urls = any(_has_selector(s, DocumentUrlStep) for s in discovery_steps)
    if not has_source_urls and not has_document_urls:
        return ValidationResult(
            error=(
                "Discovery must contain at least one source_url or document_url "
                "step with a CSS selector."
            )
        )

    warnings: list[str] = []
    has_processing_steps = any(phase_steps(u.processing) for u in workflow.url_types)

    for name, phase in _named_phases(workflow):
        error = _check_structure(phase)
        if error:
            return ValidationResult(error=error, warnings=warnings)

        steps = phase_steps(phase)
        # Processing is only reachable when Discovery hands it source URLs.
        reachable = name == DISCOVERY_PHASE or has_source_urls
        if not steps and reachable:
            return ValidationResult(
                error=f"{name} must contain at least one step inside a repeater.",
                warnings=warnings,
            )

        for step in steps:
            error = _check_step(step, url_type_ids)
            if error:
                return ValidationResult(error=error, warnings=warnings)

        error = _check_before(name, phase, workflow.playwright_enabled)
        if error:
            return ValidationResult(error=error, warnings=warnings)

    if not has_source_urls and has_processing_steps:
        warnings.append(
            "Processing phases are configured but Discovery has no source_url step; "
            "Processing will never run."
        )

    return ValidationResult(error=None, warnings=warnings)

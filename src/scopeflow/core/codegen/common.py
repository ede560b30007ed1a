"""Pieces shared by both worker contracts."""

from __future__ import annotations

import logging
from typing import Any

from ..ir.model import (
    BeforeAction,
    ClickAction,
    Evaluate,
    FillAction,
    RemoveElement,
    Screenshot,
    ScrapingWorkflow,
    Scroll,
    SelectOption,
    WaitNetwork,
    WaitSelector,
    WaitTimeout,
)

logger = logging.getLogger(__name__)


def compile_before_action(action: BeforeAction) -> dict[str, Any]:
    if isinstance(action, RemoveElement):
        return {"action": "remove_element", "selector": action.css_selector}
    if isinstance(action, WaitTimeout):
        return {"action": "wait_timeout", "ms": action.ms}
    if isinstance(action, WaitSelector):
        return {"action": "wait_selector", "selector": action.css_selector, "timeout": action.timeout_ms}
    if isinstance(action, WaitNetwork):
        return {"action": "wait_network", "state": action.state}
    if isinstance(action, ClickAction):
        out: dict[str, Any] = {"action": "click", "selector": action.css_selector}
        if action.wait_after_ms is not None:
            out["wait_after"] = action.wait_after_ms
        return out
    if isinstance(action, Scroll):
        return {"action": "scroll", "count": action.count, "delay": action.delay_ms}
    if isinstance(action, FillAction):
        return {
            "action": "fill",
            "selector": action.css_selector,
            "value": action.value,
            "press_enter": action.press_enter,
        }
    if isinstance(action, SelectOption):
        return {"action": "select_option", "selector": action.css_selector, "value": action.value}
    if isinstance(action, Evaluate):
        return {"action": "evaluate", "script": action.script}
    if isinstance(action, Screenshot):
        return {"action": "screenshot", "filename": action.filename}
    # Unknown variants degrade to a no-op wait so older compilers accept newer drafts.
    # TODO: confirm with product whether unknown actions should fail validation instead.
    logger.warning(f"Unknown before action {action.type!r}; compiled as zero-length wait")
    return {"action": "wait_timeout", "ms": 0}


def compile_before_actions(actions: list[BeforeAction]) -> list[dict[str, Any]]:
    return [compile_before_action(a) for a in actions]


def resolve_url_type_name(workflow: ScrapingWorkflow, url_type_id: str | None) -> str | None:
    """Map a URL type id to the key its Processing phase is compiled under.

    Uses ``url_type_key`` so links and phases agree on blank or padded names.
    Unknown ids pass through unchanged; a missing id means the first declared
    URL type, so single-type workflows need not tag every link.
    """
    if not url_type_id:
        if not workflow.url_types:
            return None
        first = workflow.url_types[0]
        return url_type_key(first.name, first.id)
    for url_type in workflow.url_types:
        if url_type.id == url_type_id:
            return url_type_key(url_type.name, url_type.id)
    return url_type_id


def url_type_key(name: str, url_type_id: str) -> str:
    return name.strip() or url_type_id

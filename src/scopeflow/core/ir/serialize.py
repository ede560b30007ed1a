"""Authoring JSON ⇄ IR.

The JSON shape is the workflow document the editor persists alongside a
source (``extraction_data``): snake_case keys, ``type`` discriminants on steps
and before actions. Optional keys fall back to model defaults. Before actions
of an unknown type are kept as ``UnknownAction``; unknown step types are
rejected.
"""

from __future__ import annotations

from dataclasses import asdict, fields
from typing import Any

from ..errors import WorkflowParseError
from .model import (
    BEFORE_ACTION_TYPES,
    REPEATER_STEP_TYPES,
    BeforeAction,
    Pagination,
    PhaseConfig,
    Repeater,
    RepeaterStep,
    ScopeModule,
    ScrapingWorkflow,
    UnknownAction,
    UrlType,
)

_ACTIONS_BY_TYPE = {cls.type: cls for cls in BEFORE_ACTION_TYPES}
_STEPS_BY_TYPE = {cls.type: cls for cls in REPEATER_STEP_TYPES}


def _obj(data: Any, where: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise WorkflowParseError(f"{where}: expected an object, got {type(data).__name__}")
    return data


def _list(data: dict[str, Any], key: str, where: str) -> list[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise WorkflowParseError(f"{where}.{key}: expected a list, got {type(value).__name__}")
    return value


def _required_str(data: dict[str, Any], key: str, where: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise WorkflowParseError(f"{where}.{key}: required string is missing")
    return value


def _type_error(where: str, expected: str, value: Any) -> WorkflowParseError:
    return WorkflowParseError(f"{where}: expected {expected}, got {type(value).__name__}")


def _optional_str(data: dict[str, Any], key: str, where: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise _type_error(f"{where}.{key}", "a string", value)
    return value


def _optional_int(data: dict[str, Any], key: str, where: str) -> int:
    """Integer field; numeric strings from form inputs are accepted."""
    value = data.get(key)
    if value is None or value == "":
        return 0
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            raise _type_error(f"{where}.{key}", "an integer", value) from None
    raise _type_error(f"{where}.{key}", "an integer", value)


def _optional_bool(data: dict[str, Any], key: str, where: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise _type_error(f"{where}.{key}", "a boolean", value)
    return value


# Dataclass annotations are strings under ``from __future__ import annotations``.
_SCALAR_CHECKS = {
    "str": ("a string", lambda v: isinstance(v, str)),
    "int": ("an integer", lambda v: isinstance(v, int) and not isinstance(v, bool)),
    "bool": ("a boolean", lambda v: isinstance(v, bool)),
}


def _known_fields(cls: type, data: dict[str, Any], where: str) -> dict[str, Any]:
    out = {}
    for f in fields(cls):
        value = data.get(f.name)
        if value is None:
            continue
        check = _SCALAR_CHECKS.get(str(f.type).replace(" | None", ""))
        if check is not None and not check[1](value):
            raise _type_error(f"{where}.{f.name}", check[0], value)
        out[f.name] = value
    return out


def action_from_dict(data: Any, where: str = "before") -> BeforeAction:
    data = _obj(data, where)
    action_type = data.get("type")
    if not isinstance(action_type, str):
        raise WorkflowParseError(f"{where}.type: required string is missing")
    cls = _ACTIONS_BY_TYPE.get(action_type)
    if cls is None:
        return UnknownAction(type=action_type, raw=dict(data))
    return cls(**_known_fields(cls, data, where))


def step_from_dict(data: Any, where: str = "step") -> RepeaterStep:
    data = _obj(data, where)
    step_type = data.get("type")
    cls = _STEPS_BY_TYPE.get(step_type) if isinstance(step_type, str) else None
    if cls is None:
        raise WorkflowParseError(f"{where}.type: unknown repeater step type {step_type!r}")
    _required_str(data, "id", where)
    return cls(**_known_fields(cls, data, where))


def _repeater_from_dict(data: Any, where: str) -> Repeater:
    data = _obj(data, where)
    return Repeater(
        id=_required_str(data, "id", where),
        css_selector=_optional_str(data, "css_selector", where),
        label=_optional_str(data, "label", where),
        steps=[
            step_from_dict(s, f"{where}.steps[{i}]")
            for i, s in enumerate(_list(data, "steps", where))
        ],
    )


def scope_from_dict(data: Any, where: str = "scope") -> ScopeModule:
    data = _obj(data, where)
    pagination = data.get("pagination")
    repeater = data.get("repeater")
    if pagination is not None:
        pagination = _obj(pagination, f"{where}.pagination")
    return ScopeModule(
        id=_required_str(data, "id", where),
        css_selector=_optional_str(data, "css_selector", where),
        label=_optional_str(data, "label", where),
        pagination=(
            Pagination(
                css_selector=_optional_str(pagination, "css_selector", f"{where}.pagination"),
                max_pages=_optional_int(pagination, "max_pages", f"{where}.pagination"),
            )
            if pagination is not None
            else None
        ),
        repeater=(
            _repeater_from_dict(repeater, f"{where}.repeater") if repeater is not None else None
        ),
        children=[
            scope_from_dict(c, f"{where}.children[{i}]")
            for i, c in enumerate(_list(data, "children", where))
        ],
    )


def phase_from_dict(data: Any, where: str = "phase") -> PhaseConfig:
    if data is None:
        return PhaseConfig()
    data = _obj(data, where)
    return PhaseConfig(
        before=[
            action_from_dict(a, f"{where}.before[{i}]")
            for i, a in enumerate(_list(data, "before", where))
        ],
        chain=[
            scope_from_dict(s, f"{where}.chain[{i}]")
            for i, s in enumerate(_list(data, "chain", where))
        ],
    )


def workflow_from_dict(data: Any) -> ScrapingWorkflow:
    data = _obj(data, "workflow")
    url_types = []
    for i, raw in enumerate(_list(data, "url_types", "workflow")):
        where = f"url_types[{i}]"
        raw = _obj(raw, where)
        url_types.append(
            UrlType(
                id=_required_str(raw, "id", where),
                name=_optional_str(raw, "name", where),
                processing=phase_from_dict(raw.get("processing"), f"{where}.processing"),
            )
        )
    return ScrapingWorkflow(
        discovery=phase_from_dict(data.get("discovery"), "discovery"),
        url_types=url_types,
        playwright_enabled=_optional_bool(data, "playwright_enabled", "workflow"),
    )


# --- IR → JSON ---


def action_to_dict(action: BeforeAction) -> dict[str, Any]:
    if isinstance(action, UnknownAction):
        return {**action.raw, "type": action.type}
    return {"type": action.type, **asdict(action)}


def step_to_dict(step: RepeaterStep) -> dict[str, Any]:
    out = {"type": step.type, **asdict(step)}
    # url_type_id is optional in the document; leave it out rather than null
    if out.get("url_type_id", "") is None:
        del out["url_type_id"]
    return out


def scope_to_dict(scope: ScopeModule) -> dict[str, Any]:
    return {
        "id": scope.id,
        "css_selector": scope.css_selector,
        "label": scope.label,
        "pagination": asdict(scope.pagination) if scope.pagination is not None else None,
        "repeater": (
            {
                "id": scope.repeater.id,
                "css_selector": scope.repeater.css_selector,
                "label": scope.repeater.label,
                "steps": [step_to_dict(s) for s in scope.repeater.steps],
            }
            if scope.repeater is not None
            else None
        ),
        "children": [scope_to_dict(c) for c in scope.children],
    }


def phase_to_dict(phase: PhaseConfig) -> dict[str, Any]:
    return {
        "before": [action_to_dict(a) for a in phase.before],
        "chain": [scope_to_dict(s) for s in phase.chain],
    }


def workflow_to_dict(workflow: ScrapingWorkflow) -> dict[str, Any]:
    return {
        "playwright_enabled": workflow.playwright_enabled,
        "discovery": phase_to_dict(workflow.discovery),
        "url_types": [
            {"id": u.id, "name": u.name, "processing": phase_to_dict(u.processing)}
            for u in workflow.url_types
        ],
    }

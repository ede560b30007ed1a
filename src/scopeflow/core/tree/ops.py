"""Pure edits over the scope forest.

Every function returns new values and copies only the path from the root to
the edited node; untouched siblings are shared with the input. A target id
that is not in the forest is a no-op: the input list comes back unchanged
together with ``changed=False``.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, NamedTuple, Sequence, TypeVar

from ...config.settings import settings
from ..ir.model import PhaseConfig, Repeater, RepeaterStep, ScopeModule
from .factories import create_repeater, create_scope_module
from .ids import IdFactory, create_id

logger = logging.getLogger(__name__)

T = TypeVar("T")

ScopeUpdater = Callable[[ScopeModule], ScopeModule]
RepeaterUpdater = Callable[[Repeater], Repeater]
StepUpdater = Callable[[RepeaterStep], RepeaterStep]


class ScopeRef(NamedTuple):
    scope_id: str
    scope_label: str


class RepeaterRef(NamedTuple):
    scope_id: str
    scope_label: str
    repeater_id: str
    repeater_label: str


class EnsuredRepeater(NamedTuple):
    phase: PhaseConfig
    scope_id: str
    repeater_id: str


def _missed(operation: str, target_id: str) -> None:
    if settings.debug_tree_edits:
        logger.warning(f"{operation}: no node with id {target_id!r}; tree unchanged")


def move_item(items: Sequence[T], from_index: int, to_index: int) -> Sequence[T]:
    """Relocate one element; out-of-range indices return ``items`` itself."""
    size = len(items)
    if (
        from_index == to_index
        or from_index < 0
        or to_index < 0
        or from_index >= size
        or to_index >= size
    ):
        return items
    out = list(items)
    moved = out.pop(from_index)
    out.insert(to_index, moved)
    return out


# --- Lookup ---


def find_scope_in_tree(scopes: list[ScopeModule], scope_id: str) -> ScopeModule | None:
    for scope in scopes:
        if scope.id == scope_id:
            return scope
        child = find_scope_in_tree(scope.children, scope_id)
        if child is not None:
            return child
    return None


def find_scope_for_repeater(
    scopes: list[ScopeModule], repeater_id: str
) -> ScopeModule | None:
    for scope in scopes:
        if scope.repeater is not None and scope.repeater.id == repeater_id:
            return scope
        child = find_scope_for_repeater(scope.children, repeater_id)
        if child is not None:
            return child
    return None


def find_scope_for_step(scopes: list[ScopeModule], step_id: str) -> ScopeModule | None:
    for scope in scopes:
        if scope.repeater is not None and any(s.id == step_id for s in scope.repeater.steps):
            return scope
        child = find_scope_for_step(scope.children, step_id)
        if child is not None:
            return child
    return None


def flatten_scopes(scopes: list[ScopeModule]) -> list[ScopeModule]:
    """Depth-first, parents before their children."""
    out: list[ScopeModule] = []
    for scope in scopes:
        out.append(scope)
        out.extend(flatten_scopes(scope.children))
    return out


def phase_steps(phase: PhaseConfig) -> list[RepeaterStep]:
    steps: list[RepeaterStep] = []
    for scope in flatten_scopes(phase.chain):
        if scope.repeater is not None:
            steps.extend(scope.repeater.steps)
    return steps


# --- Path-copying updates ---


def _update_scope(
    scopes: list[ScopeModule], scope_id: str, updater: ScopeUpdater
) -> tuple[list[ScopeModule], bool]:
    for index, scope in enumerate(scopes):
        if scope.id == scope_id:
            replacement = updater(scope)
        else:
            children, changed = _update_scope(scope.children, scope_id, updater)
            if not changed:
                continue
            replacement = replace(scope, children=children)
        out = list(scopes)
        out[index] = replacement
        return out, True
    return scopes, False


def update_scope_in_tree(
    scopes: list[ScopeModule], scope_id: str, updater: ScopeUpdater
) -> tuple[list[ScopeModule], bool]:
    out, changed = _update_scope(scopes, scope_id, updater)
    if not changed:
        _missed("update_scope_in_tree", scope_id)
    return out, changed


def append_child_scope(
    scopes: list[ScopeModule], parent_scope_id: str, child: ScopeModule
) -> tuple[list[ScopeModule], bool]:
    out, changed = _update_scope(
        scopes,
        parent_scope_id,
        lambda scope: replace(scope, children=[*scope.children, child]),
    )
    if not changed:
        _missed("append_child_scope", parent_scope_id)
    return out, changed


def _remove_scope(
    scopes: list[ScopeModule], scope_id: str
) -> tuple[list[ScopeModule], bool]:
    for index, scope in enumerate(scopes):
        if scope.id == scope_id:
            return scopes[:index] + scopes[index + 1 :], True
        children, removed = _remove_scope(scope.children, scope_id)
        if removed:
            out = list(scopes)
            out[index] = replace(scope, children=children)
            return out, True
    return scopes, False


def remove_scope_from_tree(
    scopes: list[ScopeModule], scope_id: str
) -> tuple[list[ScopeModule], bool]:
    """Drop the first scope with ``scope_id`` (and its subtree)."""
    out, removed = _remove_scope(scopes, scope_id)
    if not removed:
        _missed("remove_scope_from_tree", scope_id)
    return out, removed


def _update_repeater(
    scopes: list[ScopeModule], repeater_id: str, updater: RepeaterUpdater
) -> tuple[list[ScopeModule], bool]:
    for index, scope in enumerate(scopes):
        if scope.repeater is not None and scope.repeater.id == repeater_id:
            replacement = replace(scope, repeater=updater(scope.repeater))
        else:
            children, changed = _update_repeater(scope.children, repeater_id, updater)
            if not changed:
                continue
            replacement = replace(scope, children=children)
        out = list(scopes)
        out[index] = replacement
        return out, True
    return scopes, False


def update_repeater_in_tree(
    scopes: list[ScopeModule], repeater_id: str, updater: RepeaterUpdater
) -> tuple[list[ScopeModule], bool]:
    out, changed = _update_repeater(scopes, repeater_id, updater)
    if not changed:
        _missed("update_repeater_in_tree", repeater_id)
    return out, changed


def _with_steps(
    steps_fn: Callable[[list[RepeaterStep]], list[RepeaterStep]],
) -> ScopeUpdater:
    def apply(scope: ScopeModule) -> ScopeModule:
        if scope.repeater is None:
            return scope
        return replace(scope, repeater=replace(scope.repeater, steps=steps_fn(scope.repeater.steps)))

    return apply


def update_step_in_tree(
    scopes: list[ScopeModule], step_id: str, updater: StepUpdater
) -> tuple[list[ScopeModule], bool]:
    owner = find_scope_for_step(scopes, step_id)
    if owner is None:
        _missed("update_step_in_tree", step_id)
        return scopes, False
    return _update_scope(
        scopes,
        owner.id,
        _with_steps(lambda steps: [updater(s) if s.id == step_id else s for s in steps]),
    )


def remove_step_from_tree(
    scopes: list[ScopeModule], step_id: str
) -> tuple[list[ScopeModule], bool]:
    owner = find_scope_for_step(scopes, step_id)
    if owner is None:
        _missed("remove_step_from_tree", step_id)
        return scopes, False
    return _update_scope(
        scopes,
        owner.id,
        _with_steps(lambda steps: [s for s in steps if s.id != step_id]),
    )


def map_steps_in_tree(
    scopes: list[ScopeModule], mapper: StepUpdater
) -> list[ScopeModule]:
    """Apply ``mapper`` to every repeater step; unchanged subtrees are shared."""
    out: list[ScopeModule] = []
    dirty = False
    for scope in scopes:
        repeater = scope.repeater
        if repeater is not None:
            steps = [mapper(s) for s in repeater.steps]
            if any(new is not old for new, old in zip(steps, repeater.steps)):
                repeater = replace(repeater, steps=steps)
        children = map_steps_in_tree(scope.children, mapper)
        if repeater is not scope.repeater or children is not scope.children:
            scope = replace(scope, repeater=repeater, children=children)
            dirty = True
        out.append(scope)
    return out if dirty else scopes


# --- Labels ---


def _scope_label(scope: ScopeModule, path: list[str]) -> str:
    return scope.label.strip() or f"Scope {'.'.join(path)}"


def collect_scopes(scopes: list[ScopeModule]) -> list[ScopeRef]:
    result: list[ScopeRef] = []

    def walk(nodes: list[ScopeModule], parent_path: list[str]) -> None:
        for index, scope in enumerate(nodes):
            path = [*parent_path, str(index + 1)]
            result.append(ScopeRef(scope.id, _scope_label(scope, path)))
            walk(scope.children, path)

    walk(scopes, [])
    return result


def collect_repeaters(scopes: list[ScopeModule]) -> list[RepeaterRef]:
    result: list[RepeaterRef] = []

    def walk(nodes: list[ScopeModule], parent_path: list[str]) -> None:
        for index, scope in enumerate(nodes):
            path = [*parent_path, str(index + 1)]
            scope_label = _scope_label(scope, path)
            if scope.repeater is not None:
                result.append(
                    RepeaterRef(
                        scope_id=scope.id,
                        scope_label=scope_label,
                        repeater_id=scope.repeater.id,
                        repeater_label=scope.repeater.label.strip()
                        or f"Repeater ({scope_label})",
                    )
                )
            walk(scope.children, path)

    walk(scopes, [])
    return result


def normalize_selector_within_scope(selector: str, scope_selector: str | None = None) -> str:
    """Make a page-absolute selector relative to the enclosing scope."""
    full = selector.strip()
    scope = (scope_selector or "").strip()
    if not full or not scope or full == scope:
        return full
    if full.startswith(f"{scope} > "):
        return full[len(scope) + 3 :].strip()
    if full.startswith(f"{scope} "):
        return full[len(scope) + 1 :].strip()
    return full


# --- Composite ---


def ensure_scope_and_repeater(
    phase: PhaseConfig,
    scope_id: str | None,
    repeater_id: str | None,
    new_id: IdFactory = create_id,
) -> EnsuredRepeater:
    """Make sure ``scope_id`` names a scope that owns a repeater.

    A missing or stale ``scope_id`` appends a new scope to the root of the
    chain; ``repeater_id`` never selects the scope. A scope without a repeater
    gets a fresh one. Calling again with the returned ids returns the same
    phase object.
    """
    next_phase = phase
    scope = find_scope_in_tree(phase.chain, scope_id) if scope_id else None
    if scope is None:
        scope = create_scope_module(new_id)
        next_phase = replace(next_phase, chain=[*next_phase.chain, scope])

    if scope.repeater is not None:
        return EnsuredRepeater(next_phase, scope.id, scope.repeater.id)

    repeater = create_repeater(new_id)
    chain, _ = _update_scope(
        next_phase.chain, scope.id, lambda s: replace(s, repeater=repeater)
    )
    return EnsuredRepeater(replace(next_phase, chain=chain), scope.id, repeater.id)

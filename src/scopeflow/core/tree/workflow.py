"""Workflow-level edits: phases, URL types and before actions."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable

from ..ir.model import (
    BeforeAction,
    PhaseConfig,
    RepeaterStep,
    ScopeModule,
    ScrapingWorkflow,
    SourceUrlStep,
    is_playwright_action,
)
from .factories import create_default_before_action, create_url_type
from .ids import IdFactory, create_id
from .ops import (
    append_child_scope,
    find_scope_in_tree,
    map_steps_in_tree,
    update_repeater_in_tree,
)


@dataclass(frozen=True)
class PhaseRef:
    """Either Discovery (``url_type_id is None``) or one URL type's Processing."""

    url_type_id: str | None = None

    @property
    def is_discovery(self) -> bool:
        return self.url_type_id is None

    @classmethod
    def processing(cls, url_type_id: str) -> PhaseRef:
        return cls(url_type_id=url_type_id)


DISCOVERY = PhaseRef()


def get_phase(workflow: ScrapingWorkflow, ref: PhaseRef) -> PhaseConfig | None:
    if ref.is_discovery:
        return workflow.discovery
    for url_type in workflow.url_types:
        if url_type.id == ref.url_type_id:
            return url_type.processing
    return None


def update_phase(
    workflow: ScrapingWorkflow,
    ref: PhaseRef,
    updater: Callable[[PhaseConfig], PhaseConfig],
) -> ScrapingWorkflow:
    if ref.is_discovery:
        return replace(workflow, discovery=updater(workflow.discovery))
    if not any(u.id == ref.url_type_id for u in workflow.url_types):
        return workflow
    return replace(
        workflow,
        url_types=[
            replace(u, processing=updater(u.processing)) if u.id == ref.url_type_id else u
            for u in workflow.url_types
        ],
    )


# --- URL types ---


def add_url_type(
    workflow: ScrapingWorkflow, name: str | None = None, new_id: IdFactory = create_id
) -> ScrapingWorkflow:
    url_type = create_url_type(name or f"URL Type {len(workflow.url_types) + 1}", new_id)
    return replace(workflow, url_types=[*workflow.url_types, url_type])


def rename_url_type(workflow: ScrapingWorkflow, url_type_id: str, name: str) -> ScrapingWorkflow:
    name = name.strip()
    if not name:
        return workflow
    return replace(
        workflow,
        url_types=[
            replace(u, name=name) if u.id == url_type_id else u for u in workflow.url_types
        ],
    )


def remove_url_type(workflow: ScrapingWorkflow, url_type_id: str) -> ScrapingWorkflow:
    """Delete a URL type; discovery links pointing at it move to the first remaining one.

    The last URL type is never removed.
    """
    if len(workflow.url_types) <= 1:
        return workflow
    remaining = [u for u in workflow.url_types if u.id != url_type_id]
    if len(remaining) == len(workflow.url_types):
        return workflow
    fallback_id = remaining[0].id

    def repoint(step: RepeaterStep) -> RepeaterStep:
        if isinstance(step, SourceUrlStep) and step.url_type_id == url_type_id:
            return replace(step, url_type_id=fallback_id)
        return step

    discovery = replace(
        workflow.discovery, chain=map_steps_in_tree(workflow.discovery.chain, repoint)
    )
    return replace(workflow, url_types=remaining, discovery=discovery)


# --- Before actions ---


def add_before_action(
    workflow: ScrapingWorkflow, ref: PhaseRef, action: BeforeAction | str
) -> ScrapingWorkflow:
    if isinstance(action, str):
        action = create_default_before_action(action)
    return update_phase(workflow, ref, lambda p: replace(p, before=[*p.before, action]))


def has_playwright_actions(workflow: ScrapingWorkflow) -> bool:
    phases = [workflow.discovery, *(u.processing for u in workflow.url_types)]
    return any(is_playwright_action(a) for p in phases for a in p.before)


def strip_playwright_actions(workflow: ScrapingWorkflow) -> ScrapingWorkflow:
    """Drop every scripted-browser action, e.g. when Playwright mode is turned off."""

    def strip(phase: PhaseConfig) -> PhaseConfig:
        return replace(phase, before=[a for a in phase.before if not is_playwright_action(a)])

    return replace(
        workflow,
        discovery=strip(workflow.discovery),
        url_types=[replace(u, processing=strip(u.processing)) for u in workflow.url_types],
    )


# --- Scopes and steps ---


def add_child_or_root_scope(
    phase: PhaseConfig, selected_scope_id: str | None, scope: ScopeModule
) -> PhaseConfig:
    """Nest ``scope`` under the selected scope when that scope has a repeater."""
    parent = find_scope_in_tree(phase.chain, selected_scope_id) if selected_scope_id else None
    if parent is not None and parent.repeater is not None:
        chain, changed = append_child_scope(phase.chain, parent.id, scope)
        if changed:
            return replace(phase, chain=chain)
    return replace(phase, chain=[*phase.chain, scope])


def add_step_to_repeater(
    workflow: ScrapingWorkflow, ref: PhaseRef, repeater_id: str, step: RepeaterStep
) -> ScrapingWorkflow:
    """Append ``step`` to a repeater of the given phase.

    ``source_url`` steps only make sense in Discovery; elsewhere this is a
    no-op. A ``source_url`` step without a URL type gets the first one.
    """
    if isinstance(step, SourceUrlStep):
        if not ref.is_discovery:
            return workflow
        if step.url_type_id is None and workflow.url_types:
            step = replace(step, url_type_id=workflow.url_types[0].id)

    def add(phase: PhaseConfig) -> PhaseConfig:
        chain, changed = update_repeater_in_tree(
            phase.chain, repeater_id, lambda r: replace(r, steps=[*r.steps, step])
        )
        return replace(phase, chain=chain) if changed else phase

    return update_phase(workflow, ref, add)

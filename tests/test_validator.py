"""Tests for workflow validation rules."""

from __future__ import annotations

from dataclasses import replace

import pytest

from scopeflow.core.ir.model import (
    ClickAction,
    DataExtractStep,
    DocumentUrlStep,
    DownloadFileStep,
    Evaluate,
    Pagination,
    PhaseConfig,
    RemoveElement,
    Repeater,
    ScopeModule,
    SourceUrlStep,
    UnknownAction,
    UrlType,
    WaitTimeout,
)
from scopeflow.core.tree.ops import update_scope_in_tree, update_step_in_tree
from scopeflow.core.validator.validate import processing_phase_name, validate_workflow


def _with_discovery_step(workflow, step):
    chain, _ = update_step_in_tree(workflow.discovery.chain, "s-1", lambda _s: step)
    return replace(workflow, discovery=replace(workflow.discovery, chain=chain))


def _with_processing(workflow, phase):
    return replace(workflow, url_types=[replace(workflow.url_types[0], processing=phase)])


def _with_discovery_before(workflow, *actions):
    return replace(workflow, discovery=replace(workflow.discovery, before=list(actions)))


class TestValidWorkflow:
    def test_fixture_is_valid(self, workflow):
        result = validate_workflow(workflow)
        assert result.ok
        assert result.error is None
        assert result.warnings == []

    def test_phase_names(self):
        assert processing_phase_name("Articles") == "Processing (Articles)"


class TestStructuralRules:
    def test_url_type_required(self, workflow):
        result = validate_workflow(replace(workflow, url_types=[]))
        assert not result.ok
        assert "URL type" in result.error

    def test_discovery_needs_link_step(self, workflow):
        step = DataExtractStep(id="s-1", key="title", selector="h2")
        result = validate_workflow(_with_discovery_step(workflow, step))
        assert result.error == (
            "Discovery must contain at least one source_url or document_url "
            "step with a CSS selector."
        )

    def test_blank_source_url_selector_does_not_count(self, workflow):
        step = SourceUrlStep(id="s-1", selector="   ", url_type_id="url-type-1")
        result = validate_workflow(_with_discovery_step(workflow, step))
        assert result.error.startswith("Discovery must contain")

    def test_url_type_check_runs_before_discovery_check(self, workflow):
        wf = replace(workflow, url_types=[], discovery=PhaseConfig())
        assert validate_workflow(wf).error == "At least one URL type must exist."

    @pytest.mark.parametrize(
        "changes, message",
        [
            ({"css_selector": " "}, "Every scope must have a CSS selector."),
            (
                {"repeater": Repeater(id="rep-1", css_selector="", steps=[SourceUrlStep(id="s-1", selector="a")])},
                "Every repeater must have a CSS selector.",
            ),
            ({"pagination": Pagination(css_selector="", max_pages=3)}, "Pagination must have a CSS selector."),
        ],
    )
    def test_scope_selectors(self, workflow, changes, message):
        chain, _ = update_scope_in_tree(workflow.discovery.chain, "scope-1", lambda s: replace(s, **changes))
        wf = replace(workflow, discovery=replace(workflow.discovery, chain=chain))
        assert validate_workflow(wf).error == message

    def test_nested_scope_selector_is_checked(self, workflow):
        child = ScopeModule(id="child", css_selector="")
        chain, _ = update_scope_in_tree(
            workflow.discovery.chain, "scope-1", lambda s: replace(s, children=[child])
        )
        wf = replace(workflow, discovery=replace(workflow.discovery, chain=chain))
        assert validate_workflow(wf).error == "Every scope must have a CSS selector."


class TestReachability:
    def test_empty_processing_is_error_when_reachable(self, workflow):
        result = validate_workflow(_with_processing(workflow, PhaseConfig()))
        assert result.error == (
            "Processing (Default Documents) must contain at least one step inside a repeater."
        )

    def test_empty_processing_is_fine_without_source_urls(self, workflow):
        wf = _with_discovery_step(workflow, DocumentUrlStep(id="s-1", selector="a.pdf"))
        result = validate_workflow(_with_processing(wf, PhaseConfig()))
        assert result.ok
        assert result.warnings == []

    def test_unreachable_processing_steps_warn(self, workflow):
        wf = _with_discovery_step(workflow, DocumentUrlStep(id="s-1", selector="a.pdf"))
        result = validate_workflow(wf)
        assert result.ok
        assert len(result.warnings) == 1
        assert "Processing will never run" in result.warnings[0]

    def test_scope_without_repeater_has_no_steps(self, workflow):
        phase = PhaseConfig(chain=[ScopeModule(id="p", css_selector=".page")])
        result = validate_workflow(_with_processing(workflow, phase))
        assert result.error.startswith("Processing (Default Documents) must contain")


class TestStepRules:
    @pytest.mark.parametrize(
        "step, message",
        [
            (
                SourceUrlStep(id="x", selector="a", extract_type="text"),
                "source_url step must use extract_type=href.",
            ),
            (
                SourceUrlStep(id="x", selector="a", url_type_id="ghost"),
                "source_url step references an unknown URL type.",
            ),
            (DocumentUrlStep(id="x", selector=""), "document_url step requires a selector."),
            (DownloadFileStep(id="x", url_selector=" "), "download_file step requires url_selector."),
            (
                DataExtractStep(id="x", key="", selector="h1"),
                "data_extract step requires key and selector.",
            ),
            (
                DataExtractStep(id="x", key="title", selector="h1", extract_type="html"),
                "data_extract supports only extract_type text or href.",
            ),
        ],
    )
    def test_invalid_steps(self, workflow, step, message):
        repeater = Repeater(
            id="r", css_selector=".row", steps=[SourceUrlStep(id="s-1", selector="a"), step]
        )
        chain, _ = update_scope_in_tree(
            workflow.discovery.chain, "scope-1", lambda s: replace(s, repeater=repeater)
        )
        wf = replace(workflow, discovery=replace(workflow.discovery, chain=chain))
        assert validate_workflow(wf).error == message

    def test_source_url_without_type_is_allowed(self, workflow):
        wf = _with_discovery_step(workflow, SourceUrlStep(id="s-1", selector="a"))
        assert validate_workflow(wf).ok

    def test_processing_step_errors_surface(self, workflow):
        phase = workflow.url_types[0].processing
        chain, _ = update_step_in_tree(
            phase.chain, "d-1", lambda s: replace(s, selector="")
        )
        result = validate_workflow(_with_processing(workflow, replace(phase, chain=chain)))
        assert result.error == "data_extract step requires key and selector."


class TestBeforeActionRules:
    def test_playwright_action_needs_playwright(self, workflow):
        wf = _with_discovery_before(workflow, ClickAction(css_selector="button.more"))
        assert validate_workflow(wf).error == (
            "Discovery contains Playwright actions but Playwright mode is disabled."
        )

    def test_playwright_action_in_processing_names_phase(self, workflow):
        phase = replace(workflow.url_types[0].processing, before=[ClickAction(css_selector="a")])
        result = validate_workflow(_with_processing(workflow, phase))
        assert result.error.startswith("Processing (Default Documents) contains Playwright actions")

    def test_playwright_action_ok_when_enabled(self, workflow):
        wf = replace(
            _with_discovery_before(workflow, ClickAction(css_selector="button.more")),
            playwright_enabled=True,
        )
        assert validate_workflow(wf).ok

    def test_static_actions_do_not_need_playwright(self, workflow):
        wf = _with_discovery_before(
            workflow, RemoveElement(css_selector=".cookie"), WaitTimeout(ms=200), UnknownAction(type="hover")
        )
        assert validate_workflow(wf).ok

    def test_action_selector_required(self, workflow):
        wf = _with_discovery_before(workflow, RemoveElement(css_selector=" "))
        assert validate_workflow(wf).error == "Discovery: action remove_element requires a CSS selector."

    def test_evaluate_requires_script(self, workflow):
        wf = replace(_with_discovery_before(workflow, Evaluate(script="")), playwright_enabled=True)
        assert validate_workflow(wf).error == "Discovery: action evaluate requires a script."

    def test_first_failing_phase_wins(self, workflow):
        second = UrlType(
            id="url-type-2",
            name="Archive",
            processing=PhaseConfig(before=[ClickAction(css_selector="a")]),
        )
        wf = replace(
            workflow,
            discovery=replace(workflow.discovery, before=[RemoveElement(css_selector="")]),
            url_types=[*workflow.url_types, second],
        )
        assert validate_workflow(wf).error.startswith("Discovery:")

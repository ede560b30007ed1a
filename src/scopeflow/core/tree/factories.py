"""Node factories with default (empty) field values."""

from __future__ import annotations

from ..ir.model import (
    BeforeAction,
    ClickAction,
    DataExtractStep,
    DocumentUrlStep,
    DownloadFileStep,
    Evaluate,
    FillAction,
    Pagination,
    PhaseConfig,
    RemoveElement,
    Repeater,
    ScopeModule,
    Screenshot,
    ScrapingWorkflow,
    Scroll,
    SelectOption,
    SourceUrlStep,
    UrlType,
    WaitNetwork,
    WaitSelector,
    WaitTimeout,
)
from .ids import IdFactory, create_id

DEFAULT_URL_TYPE_NAME = "Default Documents"


def create_scope_module(new_id: IdFactory = create_id) -> ScopeModule:
    return ScopeModule(id=new_id("scope"))


def create_repeater(new_id: IdFactory = create_id) -> Repeater:
    return Repeater(id=new_id("repeater"))


def create_pagination() -> Pagination:
    return Pagination(css_selector="", max_pages=0)


def create_source_url_step(
    default_url_type_id: str | None = None, new_id: IdFactory = create_id
) -> SourceUrlStep:
    return SourceUrlStep(
        id=new_id("step"),
        selector="",
        extract_type="href",
        url_type_id=default_url_type_id,
    )


def create_document_url_step(new_id: IdFactory = create_id) -> DocumentUrlStep:
    return DocumentUrlStep(id=new_id("step"))


def create_download_file_step(new_id: IdFactory = create_id) -> DownloadFileStep:
    return DownloadFileStep(id=new_id("step"))


def create_data_extract_step(
    default_key: str = "", new_id: IdFactory = create_id
) -> DataExtractStep:
    return DataExtractStep(id=new_id("step"), key=default_key, extract_type="text")


def create_empty_phase() -> PhaseConfig:
    return PhaseConfig(before=[], chain=[])


def create_url_type(name: str, new_id: IdFactory = create_id) -> UrlType:
    return UrlType(id=new_id("url-type"), name=name, processing=create_empty_phase())


def create_default_workflow(
    playwright_enabled: bool = False, new_id: IdFactory = create_id
) -> ScrapingWorkflow:
    return ScrapingWorkflow(
        discovery=create_empty_phase(),
        url_types=[create_url_type(DEFAULT_URL_TYPE_NAME, new_id)],
        playwright_enabled=playwright_enabled,
    )


def create_default_before_action(action_type: str) -> BeforeAction:
    """Fresh action of the given type; unknown types get a 1s wait."""
    if action_type == "remove_element":
        return RemoveElement(css_selector="")
    if action_type == "wait_timeout":
        return WaitTimeout(ms=1000)
    if action_type == "wait_selector":
        return WaitSelector(css_selector="", timeout_ms=10000)
    if action_type == "wait_network":
        return WaitNetwork(state="networkidle")
    if action_type == "click":
        return ClickAction(css_selector="", wait_after_ms=500)
    if action_type == "scroll":
        return Scroll(count=3, delay_ms=500)
    if action_type == "fill":
        return FillAction(css_selector="", value="", press_enter=False)
    if action_type == "select_option":
        return SelectOption(css_selector="", value="")
    if action_type == "evaluate":
        return Evaluate(script="")
    if action_type == "screenshot":
        return Screenshot(filename="debug.png")
    return WaitTimeout(ms=1000)

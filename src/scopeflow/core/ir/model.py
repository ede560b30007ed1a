"""Workflow IR: scope tree, repeater steps and before actions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Union


# --- Before actions (run once when a phase begins) ---


@dataclass
class RemoveElement:
    type: ClassVar[str] = "remove_element"

    css_selector: str = ""


@dataclass
class WaitTimeout:
    type: ClassVar[str] = "wait_timeout"

    ms: int = 1000


@dataclass
class WaitSelector:
    type: ClassVar[str] = "wait_selector"

    css_selector: str = ""
    timeout_ms: int = 10000


@dataclass
class WaitNetwork:
    type: ClassVar[str] = "wait_network"

    state: str = "networkidle"  # networkidle|domcontentloaded|load


@dataclass
class ClickAction:
    type: ClassVar[str] = "click"

    css_selector: str = ""
    wait_after_ms: int | None = None


@dataclass
class Scroll:
    type: ClassVar[str] = "scroll"

    count: int = 3
    delay_ms: int = 500


@dataclass
class FillAction:
    type: ClassVar[str] = "fill"

    css_selector: str = ""
    value: str = ""
    press_enter: bool = False


@dataclass
class SelectOption:
    type: ClassVar[str] = "select_option"

    css_selector: str = ""
    value: str = ""


@dataclass
class Evaluate:
    type: ClassVar[str] = "evaluate"

    script: str = ""


@dataclass
class Screenshot:
    type: ClassVar[str] = "screenshot"

    filename: str = "debug.png"


@dataclass
class UnknownAction:
    """Action variant this version does not know; kept verbatim."""

    type: str
    raw: dict[str, Any] = field(default_factory=dict)


BeforeAction = Union[
    RemoveElement,
    WaitTimeout,
    WaitSelector,
    WaitNetwork,
    ClickAction,
    Scroll,
    FillAction,
    SelectOption,
    Evaluate,
    Screenshot,
    UnknownAction,
]

BEFORE_ACTION_TYPES: tuple[type, ...] = (
    RemoveElement,
    WaitTimeout,
    WaitSelector,
    WaitNetwork,
    ClickAction,
    Scroll,
    FillAction,
    SelectOption,
    Evaluate,
    Screenshot,
)

# Actions that need a scripted browser on the worker side
PLAYWRIGHT_ACTION_TYPES = frozenset(
    {
        "wait_selector",
        "wait_network",
        "click",
        "scroll",
        "fill",
        "select_option",
        "evaluate",
        "screenshot",
    }
)

SELECTOR_ACTIONS = (RemoveElement, WaitSelector, ClickAction, FillAction, SelectOption)


def is_playwright_action(action: BeforeAction) -> bool:
    return action.type in PLAYWRIGHT_ACTION_TYPES


def action_has_selector(action: BeforeAction) -> bool:
    return isinstance(action, SELECTOR_ACTIONS)


# --- Repeater steps (run once per repeated item) ---


@dataclass
class SourceUrlStep:
    """Discovered link to crawl, tagged with a URL type."""

    type: ClassVar[str] = "source_url"

    id: str
    selector: str = ""
    extract_type: str = "href"
    url_type_id: str | None = None


@dataclass
class DocumentUrlStep:
    type: ClassVar[str] = "document_url"

    id: str
    selector: str = ""
    filename_selector: str = ""


@dataclass
class DownloadFileStep:
    type: ClassVar[str] = "download_file"

    id: str
    url_selector: str = ""
    filename_selector: str = ""
    file_type_hint: str = ""


@dataclass
class DataExtractStep:
    type: ClassVar[str] = "data_extract"

    id: str
    key: str = ""
    selector: str = ""
    extract_type: str = "text"  # text|href


RepeaterStep = Union[SourceUrlStep, DocumentUrlStep, DownloadFileStep, DataExtractStep]

REPEATER_STEP_TYPES: tuple[type, ...] = (
    SourceUrlStep,
    DocumentUrlStep,
    DownloadFileStep,
    DataExtractStep,
)

EXTRACT_TYPES = ("text", "href")


# --- Scope tree ---


@dataclass
class Pagination:
    css_selector: str = ""
    max_pages: int = 0


@dataclass
class Repeater:
    id: str
    css_selector: str = ""
    label: str = ""
    steps: list[RepeaterStep] = field(default_factory=list)


@dataclass
class ScopeModule:
    """Element that establishes the context for nested extraction."""

    id: str
    css_selector: str = ""
    label: str = ""
    pagination: Pagination | None = None
    repeater: Repeater | None = None
    children: list[ScopeModule] = field(default_factory=list)


@dataclass
class PhaseConfig:
    before: list[BeforeAction] = field(default_factory=list)
    chain: list[ScopeModule] = field(default_factory=list)


@dataclass
class UrlType:
    id: str
    name: str
    processing: PhaseConfig = field(default_factory=PhaseConfig)


@dataclass
class ScrapingWorkflow:
    discovery: PhaseConfig = field(default_factory=PhaseConfig)
    url_types: list[UrlType] = field(default_factory=list)
    playwright_enabled: bool = False

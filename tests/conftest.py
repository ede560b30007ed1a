import sys
from pathlib import Path

import pytest

# Ensure src/ is importable when running pytest without installation
_SRC = Path(__file__).resolve().parents[1] / "src"
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

from scopeflow.core.ir.model import (  # noqa: E402
    DataExtractStep,
    PhaseConfig,
    Repeater,
    ScopeModule,
    ScrapingWorkflow,
    SourceUrlStep,
    UrlType,
)
from scopeflow.core.tree.ids import SequentialIds  # noqa: E402


@pytest.fixture
def ids():
    """Deterministic id factory."""
    return SequentialIds()


@pytest.fixture
def workflow():
    """Discovery links to one URL type whose Processing extracts a title."""
    return ScrapingWorkflow(
        playwright_enabled=False,
        discovery=PhaseConfig(
            before=[],
            chain=[
                ScopeModule(
                    id="scope-1",
                    css_selector=".list",
                    repeater=Repeater(
                        id="rep-1",
                        css_selector=".item",
                        steps=[
                            SourceUrlStep(
                                id="s-1",
                                selector="a.link",
                                extract_type="href",
                                url_type_id="url-type-1",
                            )
                        ],
                    ),
                )
            ],
        ),
        url_types=[
            UrlType(
                id="url-type-1",
                name="Default Documents",
                processing=PhaseConfig(
                    before=[],
                    chain=[
                        ScopeModule(
                            id="processing-scope-1",
                            css_selector=".docs",
                            repeater=Repeater(
                                id="processing-repeater-1",
                                css_selector=".doc-item",
                                steps=[
                                    DataExtractStep(
                                        id="d-1",
                                        key="title",
                                        selector="h1",
                                        extract_type="text",
                                    )
                                ],
                            ),
                        )
                    ],
                ),
            )
        ],
    )


@pytest.fixture
def nested_chain():
    """Three-level scope tree: root > middle > leaf, plus a root sibling."""
    leaf = ScopeModule(id="leaf", css_selector=".leaf")
    middle = ScopeModule(id="middle", css_selector=".middle", children=[leaf])
    root = ScopeModule(id="root", css_selector=".root", children=[middle])
    sibling = ScopeModule(id="sibling", css_selector=".sibling")
    return [root, sibling]

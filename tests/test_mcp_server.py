"""Tests for the MCP tool handlers."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from fastmcp.exceptions import ToolError
from scopeflow.core.ir.serialize import workflow_to_dict
from scopeflow.mcp_server import compile_document, mcp, validate_document

pytestmark = pytest.mark.mcp


@pytest.fixture
def document(workflow):
    return workflow_to_dict(workflow)


class TestValidateTool:
    def test_valid_document(self, document):
        assert validate_document(document) == {"ok": True, "error": None, "warnings": []}

    def test_rule_failure_is_a_result(self, document):
        document["discovery"]["chain"] = []
        result = validate_document(document)
        assert result["ok"] is False
        assert result["error"].startswith("Discovery must contain")

    def test_malformed_document(self):
        with pytest.raises(ToolError, match="unknown repeater step type"):
            validate_document(
                {
                    "discovery": {
                        "chain": [{"id": "s", "repeater": {"id": "r", "steps": [{"type": "video", "id": "v"}]}}]
                    }
                }
            )


class TestCompileTool:
    def test_compile_default_version(self, document):
        result = compile_document(document)
        assert result["schema_version"] == 2
        assert result["crawl_params"]["discovery"]["chain"][0]["selector"] == ".list"

    def test_compile_flat(self, document):
        result = compile_document(document, 1)
        assert result["crawl_params"]["processing"][0]["fields"][0]["name"] == "title"

    def test_invalid_workflow(self, document):
        document["url_types"] = []
        with pytest.raises(ToolError, match="Workflow is not valid: At least one URL type must exist."):
            compile_document(document)

    def test_unsupported_version(self, document):
        with pytest.raises(ToolError, match="Unsupported contract schema_version"):
            compile_document(document, 4)


def test_server_name():
    assert mcp.name == "scopeflow"


class TestContractCheckSetting:
    def test_check_runs_when_enabled(self, document):
        with patch("scopeflow.mcp_server.settings") as mock_settings, patch(
            "scopeflow.mcp_server.check_contract"
        ) as mock_check:
            mock_settings.check_contract_schema = True
            result = compile_document(document, 2)
        mock_check.assert_called_once_with(result["crawl_params"], 2)

    def test_check_skipped_when_disabled(self, document):
        with patch("scopeflow.mcp_server.settings") as mock_settings, patch(
            "scopeflow.mcp_server.check_contract"
        ) as mock_check:
            mock_settings.check_contract_schema = False
            compile_document(document, 2)
        mock_check.assert_not_called()

"""FastMCP server exposing workflow validation and compilation.

Agents that assemble scraping workflows as JSON can check them and obtain the
worker contract without going through the HTTP API.
"""

from __future__ import annotations

import logging
from typing import Any

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from starlette.requests import Request
from starlette.responses import JSONResponse

from .config.settings import settings
from .core.codegen.generator import compile_checked
from .core.errors import ContractCompileError, WorkflowParseError, WorkflowValidationError
from .core.ir.serialize import workflow_from_dict
from .core.validator.contract import check_contract
from .core.validator.validate import validate_workflow

logger = logging.getLogger(__name__)

mcp = FastMCP(name="scopeflow")


def validate_document(workflow: dict[str, Any]) -> dict[str, Any]:
    try:
        result = validate_workflow(workflow_from_dict(workflow))
    except WorkflowParseError as e:
        raise ToolError(str(e)) from e
    return {"ok": result.ok, "error": result.error, "warnings": result.warnings}


def compile_document(workflow: dict[str, Any], schema_version: int | None = None) -> dict[str, Any]:
    try:
        compiled = compile_checked(workflow_from_dict(workflow), schema_version)
        if settings.check_contract_schema:
            check_contract(compiled.contract, compiled.schema_version)
    except WorkflowValidationError as e:
        raise ToolError(f"Workflow is not valid: {e.result.error}") from e
    except (WorkflowParseError, ContractCompileError) as e:
        raise ToolError(str(e)) from e
    return {
        "schema_version": compiled.schema_version,
        "crawl_params": compiled.contract,
        "warnings": compiled.warnings,
    }


@mcp.custom_route("/health", methods=["GET"])
async def health_check(request: Request) -> JSONResponse:  # noqa: ARG001
    """Health check endpoint for Kubernetes probes."""
    return JSONResponse({"status": "healthy", "service": "scopeflow-mcp"})


@mcp.tool(name="validate_workflow")
def validate_workflow_tool(workflow: dict[str, Any]) -> dict[str, Any]:
    """Check a scraping workflow before it is submitted.

    Args:
        workflow: Authoring document with ``discovery``, ``url_types`` and
            ``playwright_enabled``

    Returns:
        dict with ``ok``, the blocking ``error`` (or null) and advisory ``warnings``
    """
    return validate_document(workflow)


@mcp.tool(name="compile_workflow")
def compile_workflow_tool(workflow: dict[str, Any], schema_version: int | None = None) -> dict[str, Any]:
    """Compile a valid scraping workflow into the crawler worker contract.

    Args:
        workflow: Authoring document with ``discovery``, ``url_types`` and
            ``playwright_enabled``
        schema_version: 1 for the flat legacy contract, 2 for the nested one;
            omitted means the server default

    Returns:
        dict with ``schema_version``, ``crawl_params`` and ``warnings``
    """
    return compile_document(workflow, schema_version)


def main() -> None:
    """Run the MCP server with streamable-http transport."""
    logging.basicConfig(level=settings.log_level)
    logger.info(f"Starting scopeflow MCP server on {settings.mcp_host}:{settings.mcp_port}/mcp")
    mcp.run(transport="streamable-http", host=settings.mcp_host, port=settings.mcp_port, path="/mcp")


if __name__ == "__main__":
    main()

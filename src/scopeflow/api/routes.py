from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException

from ..config.settings import settings
from ..core.codegen.generator import compile_checked
from ..core.errors import ContractCompileError, WorkflowParseError, WorkflowValidationError
from ..core.ir.serialize import workflow_from_dict
from ..core.validator.contract import check_contract, contract_schema
from ..core.validator.validate import validate_workflow
from ..telemetry import workflow_span
from .dto import CompileRequest, CompileResponse, ValidateRequest, ValidateResponse


router = APIRouter()


@router.post("/workflows/validate", response_model=ValidateResponse)
def validate(req: ValidateRequest) -> ValidateResponse:
    with workflow_span("workflow.validate") as span:
        try:
            workflow = workflow_from_dict(req.workflow)
        except WorkflowParseError as e:
            raise HTTPException(status_code=422, detail=str(e))
        result = validate_workflow(workflow)
        if span is not None:
            span.set_attribute("scopeflow.valid", result.ok)
    return ValidateResponse(ok=result.ok, error=result.error, warnings=result.warnings)


@router.post("/workflows/compile", response_model=CompileResponse)
def compile_(req: CompileRequest) -> CompileResponse:
    with workflow_span("workflow.compile", schema_version=req.schema_version):
        try:
            workflow = workflow_from_dict(req.workflow)
            compiled = compile_checked(workflow, req.schema_version)
            if settings.check_contract_schema:
                check_contract(compiled.contract, compiled.schema_version)
        except WorkflowParseError as e:
            raise HTTPException(status_code=422, detail=str(e))
        except WorkflowValidationError as e:
            raise HTTPException(
                status_code=422, detail={"error": e.result.error, "warnings": e.warnings}
            )
        except ContractCompileError as e:
            raise HTTPException(status_code=400, detail=str(e))
    return CompileResponse(
        schema_version=compiled.schema_version,
        crawl_params=compiled.contract,
        warnings=compiled.warnings,
    )


@router.get("/contracts/{version}/schema")
def get_contract_schema(version: int) -> dict[str, Any]:
    try:
        return contract_schema(version)
    except ContractCompileError as e:
        raise HTTPException(status_code=404, detail=str(e))

"""JSON Schemas of the worker contracts and a strict check against them."""

from __future__ import annotations

import copy
from typing import Any, Dict

import jsonschema
from jsonschema.exceptions import best_match

from ..errors import ContractCompileError

_SELECTOR = {"type": "string"}

BEFORE_ACTION_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["action"],
    "properties": {
        "action": {
            "enum": [
                "remove_element",
                "wait_timeout",
                "wait_selector",
                "wait_network",
                "click",
                "scroll",
                "fill",
                "select_option",
                "evaluate",
                "screenshot",
            ]
        },
        "selector": _SELECTOR,
        "ms": {"type": "integer", "minimum": 0},
        "timeout": {"type": "integer"},
        "state": {"enum": ["networkidle", "domcontentloaded", "load"]},
        "wait_after": {"type": "integer"},
        "count": {"type": "integer"},
        "delay": {"type": "integer"},
        "value": {"type": "string"},
        "press_enter": {"type": "boolean"},
        "script": {"type": "string"},
        "filename": {"type": "string"},
    },
    "additionalProperties": False,
}

PAGINATION_SCHEMA: Dict[str, Any] = {
    "type": ["object", "null"],
    "required": ["selector", "max_pages"],
    "properties": {"selector": _SELECTOR, "max_pages": {"type": "integer"}},
    "additionalProperties": False,
}

FLAT_PHASE_PROPERTIES: Dict[str, Any] = {
    "before": {"type": "array", "items": BEFORE_ACTION_SCHEMA},
    "scope": {"type": ["string", "null"]},
    "repeater": {"type": ["string", "null"]},
    "fields": {
        "type": "array",
        "items": {
            "type": "object",
            "required": ["name", "selector", "type"],
            "properties": {
                "name": {"type": "string"},
                "selector": _SELECTOR,
                "type": {"enum": ["text", "href"]},
            },
            "additionalProperties": False,
        },
    },
    "pagination": PAGINATION_SCHEMA,
}

FLAT_CONTRACT_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Flat worker crawl params",
    "type": "object",
    "required": ["playwright", "discovery", "processing"],
    "properties": {
        "playwright": {"type": "boolean"},
        "discovery": {
            "type": "object",
            "required": list(FLAT_PHASE_PROPERTIES),
            "properties": FLAT_PHASE_PROPERTIES,
            "additionalProperties": False,
        },
        "processing": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["url_type", *FLAT_PHASE_PROPERTIES],
                "properties": {"url_type": {"type": "string"}, **FLAT_PHASE_PROPERTIES},
                "additionalProperties": False,
            },
        },
    },
    "additionalProperties": False,
}

NESTED_STEP_SCHEMA: Dict[str, Any] = {
    "oneOf": [
        {
            "type": "object",
            "required": ["type", "selector", "url_type"],
            "properties": {
                "type": {"const": "source_url"},
                "selector": _SELECTOR,
                "url_type": {"type": ["string", "null"]},
            },
            "additionalProperties": False,
        },
        {
            "type": "object",
            "required": ["type", "selector", "filename_selector"],
            "properties": {
                "type": {"const": "document_url"},
                "selector": _SELECTOR,
                "filename_selector": _SELECTOR,
            },
            "additionalProperties": False,
        },
        {
            "type": "object",
            "required": ["type", "url_selector", "filename_selector"],
            "properties": {
                "type": {"const": "download_file"},
                "url_selector": _SELECTOR,
                "filename_selector": _SELECTOR,
                "file_type_hint": {"type": "string"},
            },
            "additionalProperties": False,
        },
        {
            "type": "object",
            "required": ["type", "key", "extract", "selector"],
            "properties": {
                "type": {"const": "data_extract"},
                "key": {"type": "string"},
                "extract": {"enum": ["text", "href"]},
                "selector": _SELECTOR,
            },
            "additionalProperties": False,
        },
    ]
}

NESTED_CONTRACT_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Nested worker crawl params",
    "type": "object",
    "required": ["schema_version", "playwright", "discovery", "processing"],
    "$defs": {
        "scope": {
            "type": "object",
            "required": ["selector", "label", "repeater", "pagination", "children"],
            "properties": {
                "selector": _SELECTOR,
                "label": {"type": "string"},
                "repeater": {
                    "type": ["object", "null"],
                    "required": ["selector", "label", "steps"],
                    "properties": {
                        "selector": _SELECTOR,
                        "label": {"type": "string"},
                        "steps": {"type": "array", "items": NESTED_STEP_SCHEMA},
                    },
                    "additionalProperties": False,
                },
                "pagination": PAGINATION_SCHEMA,
                "children": {"type": "array", "items": {"$ref": "#/$defs/scope"}},
            },
            "additionalProperties": False,
        },
        "phase": {
            "type": "object",
            "required": ["before", "chain"],
            "properties": {
                "before": {"type": "array", "items": BEFORE_ACTION_SCHEMA},
                "chain": {"type": "array", "items": {"$ref": "#/$defs/scope"}},
            },
        },
    },
    "properties": {
        "schema_version": {"const": 2},
        "playwright": {"type": "boolean"},
        "discovery": {
            "allOf": [{"$ref": "#/$defs/phase"}],
            "unevaluatedProperties": False,
        },
        "processing": {
            "type": "array",
            "items": {
                "allOf": [{"$ref": "#/$defs/phase"}],
                "required": ["url_type"],
                "properties": {"url_type": {"type": "string"}},
                "unevaluatedProperties": False,
            },
        },
    },
    "additionalProperties": False,
}

CONTRACT_SCHEMAS: Dict[int, Dict[str, Any]] = {
    1: FLAT_CONTRACT_SCHEMA,
    2: NESTED_CONTRACT_SCHEMA,
}


def contract_schema(version: int) -> Dict[str, Any]:
    try:
        return copy.deepcopy(CONTRACT_SCHEMAS[version])
    except KeyError as exc:
        raise ContractCompileError(f"No contract schema for schema_version {version}") from exc


def check_contract(payload: Dict[str, Any], version: int) -> None:
    """Raise ``ContractCompileError`` if ``payload`` breaks the contract schema."""
    schema = CONTRACT_SCHEMAS.get(version)
    if schema is None:
        raise ContractCompileError(f"No contract schema for schema_version {version}")
    validator = jsonschema.Draft202012Validator(schema)
    error = best_match(validator.iter_errors(payload))
    if error is not None:
        path = "/".join(str(p) for p in error.absolute_path) or "<root>"
        raise ContractCompileError(f"Contract v{version} violation at {path}: {error.message}")

from __future__ import annotations

import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    default_schema_version: int = int(os.getenv("CONTRACT_SCHEMA_VERSION", "2"))
    debug_tree_edits: bool = _env_bool("DEBUG_TREE_EDITS", False)
    check_contract_schema: bool = _env_bool("CHECK_CONTRACT_SCHEMA", True)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    mcp_host: str = os.getenv("MCP_HOST", "0.0.0.0")  # nosec B104 - container binding
    mcp_port: int = int(os.getenv("MCP_PORT", "8085"))


settings = Settings()

#!/usr/bin/env python3
"""Post a workflow document to a running Scopeflow API and print the result.

Usage: smoke_compile_api.py [workflow.json] [--schema-version N]
Without a file, a minimal two-phase workflow is used.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any

try:
    import requests
except ImportError:
    print("Please install requests: pip install 'scopeflow[scripts]'", file=sys.stderr)
    sys.exit(1)


BASE_URL = os.getenv("SCOPEFLOW_BASE_URL", "http://127.0.0.1:8000")
TIMEOUT = int(os.getenv("SCOPEFLOW_TIMEOUT", "30"))

SAMPLE_WORKFLOW: dict[str, Any] = {
    "playwright_enabled": False,
    "discovery": {
        "before": [{"type": "remove_element", "css_selector": "#cookie-banner"}],
        "chain": [
            {
                "id": "scope-1",
                "css_selector": "ul.results",
                "label": "Results",
                "pagination": {"css_selector": "a.next", "max_pages": 5},
                "repeater": {
                    "id": "repeater-1",
                    "css_selector": "li",
                    "label": "",
                    "steps": [
                        {"id": "step-1", "type": "source_url", "selector": "a", "extract_type": "href"}
                    ],
                },
                "children": [],
            }
        ],
    },
    "url_types": [
        {
            "id": "url-type-1",
            "name": "Documents",
            "processing": {
                "before": [],
                "chain": [
                    {
                        "id": "scope-2",
                        "css_selector": "article",
                        "label": "",
                        "pagination": None,
                        "repeater": {
                            "id": "repeater-2",
                            "css_selector": ".attachment",
                            "label": "",
                            "steps": [
                                {"id": "step-2", "type": "download_file", "url_selector": "a"},
                                {
                                    "id": "step-3",
                                    "type": "data_extract",
                                    "key": "title",
                                    "selector": "h1",
                                    "extract_type": "text",
                                },
                            ],
                        },
                        "children": [],
                    }
                ],
            },
        }
    ],
}


def post_json(path: str, payload: dict[str, Any]) -> requests.Response:
    url = f"{BASE_URL}{path}"
    return requests.post(url, json=payload, timeout=TIMEOUT)


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("workflow", nargs="?", help="Path to a workflow JSON document")
    parser.add_argument("--schema-version", type=int, default=None)
    args = parser.parse_args()

    if args.workflow:
        with open(args.workflow, encoding="utf-8") as fh:
            workflow = json.load(fh)
    else:
        workflow = SAMPLE_WORKFLOW

    r = post_json("/workflows/validate", {"workflow": workflow})
    print("validate status", r.status_code)
    print(json.dumps(r.json(), ensure_ascii=False, indent=2))

    r = post_json(
        "/workflows/compile",
        {"workflow": workflow, "schema_version": args.schema_version},
    )
    print("compile status", r.status_code)
    print(json.dumps(r.json(), ensure_ascii=False, indent=2))
    return 0 if r.ok else 1


if __name__ == "__main__":
    sys.exit(main())

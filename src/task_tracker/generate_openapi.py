"""
Write the OpenAPI schema of the tracker API to a JSON file, so clients and
documentation tools can consume it without running the server.

Usage:
    python -m task_tracker.generate_openapi [output-path]

The default output path is interfaces/openapi.json under the current directory.
"""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .main import create_app, openapi_tags
from .settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = Path("interfaces") / "openapi.json"


def _ensure_tags(schema: Dict[str, Any]) -> None:
    """Add any tag from openapi_tags the generated schema is missing."""
    existing_tags: List[Dict[str, Any]] = schema.get("tags", []) or []
    existing_names = {t.get("name") for t in existing_tags if isinstance(t, dict)}
    for tag in openapi_tags:
        if tag.get("name") not in existing_names:
            existing_tags.append(tag)
    if existing_tags:
        schema["tags"] = existing_tags


# PUBLIC_INTERFACE
def generate_openapi(out_path: Optional[Path] = None) -> Path:
    """Generate the OpenAPI schema file and return the written file path."""
    # In-memory settings: generating the schema must not touch a database.
    schema = create_app(Settings()).openapi()
    _ensure_tags(schema)

    target = Path(out_path) if out_path is not None else DEFAULT_OUTPUT
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
    logger.info("Wrote OpenAPI schema to %s", target)
    return target


if __name__ == "__main__":
    generate_openapi(Path(sys.argv[1]) if len(sys.argv) > 1 else None)

"""
Utility script to generate and write the OpenAPI schema for the FastAPI app.

Builds an application with create_app and serializes its OpenAPI schema to
interfaces/openapi.json so that API clients and documentation tools can
consume a stable schema without running the server. Building the app does not
start the reminder sweep; that only happens in the application lifespan.

Usage:
    python -m src.todo_reminder.generate_openapi [output-path]
"""
from __future__ import annotations

import json
import os
import sys
from typing import Any, Dict, List, Optional

from .main import create_app, openapi_tags


def _ensure_tags(schema: Dict[str, Any]) -> None:
    """
    Ensure the OpenAPI schema carries every tag in openapi_tags with its
    description. Existing tag definitions are not overridden.
    """
    existing_tags: List[Dict[str, Any]] = schema.get("tags", []) or []
    existing_names = {t.get("name") for t in existing_tags if isinstance(t, dict)}
    for tag in openapi_tags:
        if tag.get("name") not in existing_names:
            existing_tags.append(tag)
    if existing_tags:
        schema["tags"] = existing_tags


def default_output_path() -> str:
    # <project root>/interfaces/openapi.json
    package_dir = os.path.dirname(os.path.abspath(__file__))
    project_root = os.path.dirname(os.path.dirname(package_dir))
    return os.path.join(project_root, "interfaces", "openapi.json")


# PUBLIC_INTERFACE
def generate_openapi(out_path: Optional[str] = None) -> str:
    """Write the OpenAPI schema file and return the path written."""
    schema = create_app().openapi()
    _ensure_tags(schema)

    path = out_path or default_output_path()
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
    return path


def main(argv: Optional[List[str]] = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    path = generate_openapi(args[0] if args else None)
    print(f"Wrote OpenAPI schema to: {path}")


if __name__ == "__main__":
    main()

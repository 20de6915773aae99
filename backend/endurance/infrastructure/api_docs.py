"""API Documentation — OpenAPI document and Swagger UI for the mounted module routes.

Invariants:
    - generate() receives only route files that mounted successfully
    - The generated document is pinned: app.openapi() and the JSON endpoint both serve it,
      even after later routes (docs, system) change the app route set
    - swagger.json in the project root overrides title/version/description/servers;
      an unreadable or malformed file falls back to defaults (logged)
    - Served at /api-docs/swagger.json (JSON) and /api-docs (UI), both excluded from the schema
"""

import json
import logging
from pathlib import Path
from typing import Any

from fastapi import FastAPI
from fastapi.openapi.docs import get_swagger_ui_html
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

DOCS_PATH = "/api-docs"
SPEC_PATH = "/api-docs/swagger.json"

DEFAULT_DEFINITION: dict[str, Any] = {
    "info": {
        "title": "Endurance API",
        "version": "1.0.0",
        "description": "Description of the Endurance API",
    },
    "servers": [{"url": "http://localhost:3000", "description": "Local server"}],
}


def load_definition(config_path: Path) -> dict[str, Any]:
    """Read the docs definition; accepts a bare definition or a `swaggerDefinition` wrapper."""
    if not config_path.is_file():
        return DEFAULT_DEFINITION
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable docs config {config_path}: {e}")
        return DEFAULT_DEFINITION
    if not isinstance(data, dict):
        logger.warning(f"Ignoring docs config {config_path}: not a JSON object")
        return DEFAULT_DEFINITION
    definition = data.get("swaggerDefinition", data)
    return {
        "info": {**DEFAULT_DEFINITION["info"], **definition.get("info", {})},
        "servers": definition.get("servers", DEFAULT_DEFINITION["servers"]),
    }


class ApiDocs:
    def __init__(self, app: FastAPI, definition: dict[str, Any] | None = None):
        self.app = app
        self.definition = definition or DEFAULT_DEFINITION
        self.schema: dict[str, Any] | None = None

    def generate(self, route_files: list[Path]) -> dict[str, Any]:
        info = self.definition["info"]
        schema = get_openapi(
            title=info["title"],
            version=info["version"],
            description=info.get("description"),
            routes=self.app.routes,
            servers=self.definition.get("servers"),
        )
        schema["x-route-files"] = [str(path) for path in route_files]
        self.app.openapi_schema = schema
        self.app.openapi = self.document
        self.schema = schema
        logger.info(f"API docs generated from {len(route_files)} route files")
        return schema

    def document(self) -> dict[str, Any]:
        if self.schema is None:
            raise RuntimeError("API docs have not been generated")
        return self.schema

    def setup(self) -> None:
        """Expose the generated document and the Swagger UI."""
        title = self.definition["info"]["title"]

        @self.app.get(SPEC_PATH, include_in_schema=False)
        async def swagger_json():
            return JSONResponse(self.document())

        @self.app.get(DOCS_PATH, include_in_schema=False)
        async def swagger_ui():
            return get_swagger_ui_html(openapi_url=SPEC_PATH, title=title)

"""OpenAPI patching for form submission endpoints."""

import orjson
from robyn import Response

from app.core.logger import LogIcon, logger
from app.core.router import FORM_ENDPOINTS
from app.middlewares.base import BaseMiddleware
from app.services.intake import REQUIRED_FIELDS


def form_request_body() -> dict:
    """OpenAPI requestBody accepting the application as multipart or JSON."""
    fields = {name: {"type": "string"} for name in REQUIRED_FIELDS}
    return {
        "content": {
            "multipart/form-data": {
                "schema": {
                    "type": "object",
                    "properties": {
                        **fields,
                        "files": {
                            "type": "array",
                            "items": {"type": "string", "format": "binary"},
                            "description": "Attachments, any field name",
                        },
                    },
                    "required": list(REQUIRED_FIELDS),
                }
            },
            "application/json": {
                "schema": {
                    "type": "object",
                    "properties": {
                        **fields,
                        "files": {
                            "type": "array",
                            "items": {
                                "type": "object",
                                "properties": {
                                    "name": {"type": "string"},
                                    "filename": {"type": "string"},
                                    "contentType": {"type": "string"},
                                    "data": {"type": "string", "format": "byte"},
                                },
                                "required": ["filename", "data"],
                            },
                        },
                    },
                    "required": list(REQUIRED_FIELDS),
                }
            },
        },
        "required": True,
    }


class FormOpenAPIMiddleware(BaseMiddleware):
    """Patches OpenAPI responses with the form schema of form endpoints."""

    endpoints = frozenset(["/openapi.json"])

    def after(self, response: Response) -> Response:
        """Patch OpenAPI spec with multipart/form-data and JSON bodies for form endpoints."""
        if not FORM_ENDPOINTS:
            return response

        try:
            spec = orjson.loads(response.description)
        except orjson.JSONDecodeError as ex:
            logger.warning("OpenAPI document is not JSON, leaving it unpatched", icon=LogIcon.WARNING, error=str(ex))
            return response

        paths = spec.get("paths", {})
        for endpoint in FORM_ENDPOINTS:
            if "post" in paths.get(endpoint, {}):
                paths[endpoint]["post"]["requestBody"] = form_request_body()

        response.description = orjson.dumps(spec).decode()
        return response

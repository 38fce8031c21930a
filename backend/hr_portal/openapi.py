"""Minimal deterministic OpenAPI document for the portal API.

Scope: auth, permission sections, navigation and role endpoints. Schemas
are intentionally shallow; the JSON payloads are documented by example in
the tests.
"""
from typing import Any, Dict

__all__ = ["build_openapi_spec"]

_SECTION_SCHEMA = {
    "type": "object",
    "properties": {
        "key": {"type": "string"},
        "label": {"type": "string"},
        "path": {"type": "string"},
        "group": {"type": "string", "nullable": True},
        "sortOrder": {"type": "integer"},
        "actions": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["key", "label", "path"],
}


def _ok(description: str = "OK", schema: str = "") -> Dict[str, Any]:
    resp: Dict[str, Any] = {"description": description}
    if schema:
        resp["content"] = {"application/json": {"schema": {"$ref": f"#/components/schemas/{schema}"}}}
    return resp


def _secured(op: Dict[str, Any]) -> Dict[str, Any]:
    op["security"] = [{"BearerAuth": []}]
    op.setdefault("responses", {})["401"] = {"description": "Missing or invalid token"}
    op["responses"]["403"] = {"$ref": "#/components/responses/Forbidden"}
    return op


def build_openapi_spec() -> Dict[str, Any]:
    components: Dict[str, Any] = {
        "schemas": {
            "Section": _SECTION_SCHEMA,
            "Role": {
                "type": "object",
                "properties": {"key": {"type": "string"}, "name": {"type": "string"}, "isDirector": {"type": "boolean"}},
                "required": ["key", "name"],
            },
            "SectionsPayload": {
                "type": "object",
                "properties": {
                    "sections": {"type": "array", "items": {"$ref": "#/components/schemas/Section"}},
                    "roles": {"type": "array", "items": {"$ref": "#/components/schemas/Role"}},
                    "roleAccess": {"type": "object", "additionalProperties": {"type": "array", "items": {"type": "string"}}},
                    "source": {"type": "string"},
                    "reason": {"type": "string"},
                },
                "required": ["sections", "roles", "roleAccess"],
            },
            "RoleSectionsUpdate": {
                "type": "object",
                "properties": {"role": {"type": "string"}, "sections": {"type": "array", "items": {"type": "string"}}},
                "required": ["role", "sections"],
            },
            "Navigation": {
                "type": "object",
                "properties": {
                    "role": {"type": "string"},
                    "active": {"type": "string", "nullable": True},
                    "allowedSections": {"type": "array", "items": {"type": "string"}},
                    "menu": {"type": "array", "items": {"$ref": "#/components/schemas/Section"}},
                },
            },
            "Pagination": {
                "type": "object",
                "properties": {
                    "total": {"type": "integer"},
                    "limit": {"type": "integer"},
                    "offset": {"type": "integer"},
                    "returned": {"type": "integer"},
                },
                "required": ["total", "limit", "offset", "returned"],
            },
            "Error": {
                "type": "object",
                "properties": {
                    "error": {
                        "type": "object",
                        "properties": {"status": {"type": "integer"}, "title": {"type": "string"}, "detail": {"type": "string"}},
                    }
                },
                "required": ["error"],
            },
        },
        "responses": {
            "BadRequest": {"description": "Bad Request"},
            "Forbidden": {"description": "Forbidden"},
            "NotFound": {"description": "Not Found"},
        },
        "securitySchemes": {"BearerAuth": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}},
        "parameters": {
            "LimitParam": {"name": "limit", "in": "query", "schema": {"type": "integer", "default": 50}},
            "OffsetParam": {"name": "offset", "in": "query", "schema": {"type": "integer", "default": 0}},
            "RoleIdParam": {"name": "role_id", "in": "path", "required": True, "schema": {"type": "integer"}},
            "ActiveParam": {"name": "active", "in": "query", "schema": {"type": "string"},
                            "description": "Section currently rendered; always reachable"},
        },
    }

    paths: Dict[str, Any] = {
        "/auth/login": {"post": {"summary": "Login", "responses": {"200": _ok("JWT and session snapshot issued"), "401": {"description": "Invalid credentials"}}}},
        "/auth/me": {"get": _secured({"summary": "Current account", "responses": {"200": _ok()}})},
        "/permissions/sections": {
            "get": {"summary": "Section catalog, roles and role grants", "responses": {"200": _ok("Catalog", "SectionsPayload")}},
            "put": _secured({
                "summary": "Replace the section grants of one role",
                "requestBody": {"content": {"application/json": {"schema": {"$ref": "#/components/schemas/RoleSectionsUpdate"}}}},
                "responses": {"200": _ok("Stored sections", "RoleSectionsUpdate"), "400": {"$ref": "#/components/responses/BadRequest"}},
            }),
            "post": _secured({
                "summary": "Create a section (ADMIN only)",
                "requestBody": {"content": {"application/json": {"schema": {"$ref": "#/components/schemas/Section"}}}},
                "responses": {"201": _ok("Created", "Section"), "400": {"$ref": "#/components/responses/BadRequest"}},
            }),
        },
        "/permissions/navigation": {
            "get": _secured({
                "summary": "Menu for the current session",
                "parameters": [{"$ref": "#/components/parameters/ActiveParam"}],
                "responses": {"200": _ok("Navigation", "Navigation")},
            })
        },
        "/permissions/navigation/{section_key}": {
            "get": _secured({
                "summary": "Check whether the session is granted a section",
                "parameters": [
                    {"name": "section_key", "in": "path", "required": True, "schema": {"type": "string"}},
                ],
                "responses": {"200": _ok()},
            })
        },
        "/roles": {
            "get": _secured({
                "summary": "List roles",
                "parameters": [{"$ref": "#/components/parameters/LimitParam"}, {"$ref": "#/components/parameters/OffsetParam"}],
                "responses": {"200": _ok(), "304": {"description": "Not Modified"}},
            }),
            "post": _secured({"summary": "Create role", "responses": {"201": _ok("Created"), "400": {"$ref": "#/components/responses/BadRequest"}}}),
        },
        "/roles/{role_id}": {
            "patch": _secured({
                "summary": "Rename role (key re-derived unless given)",
                "parameters": [{"$ref": "#/components/parameters/RoleIdParam"}],
                "responses": {"200": _ok(), "400": {"$ref": "#/components/responses/BadRequest"}, "404": {"$ref": "#/components/responses/NotFound"}},
            }),
            "delete": _secured({
                "summary": "Delete role and its section grants",
                "parameters": [{"$ref": "#/components/parameters/RoleIdParam"}],
                "responses": {"200": _ok(), "404": {"$ref": "#/components/responses/NotFound"}},
            }),
        },
        "/healthz": {"get": {"summary": "Liveness probe", "responses": {"200": _ok()}}},
    }

    return {
        "openapi": "3.0.3",
        "info": {"title": "HR Portal Permissions API", "version": "1.0.0"},
        "paths": paths,
        "components": components,
    }

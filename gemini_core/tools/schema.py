"""JSON schema -> 请求 Schema 的转换。

工具协作方（如 MCP server）以 JSON schema 描述参数，
接口只接受 OpenAPI 子集。能结构化映射的字段逐一转换，
遇到无法表达的构造（$ref、allOf/oneOf/not、多类型联合等）抛出 SchemaError，
由 ToolRegistration 决定跳过该工具。
"""

from typing import Any, Dict, List, Optional, Tuple

from gemini_core.domain.exceptions import SchemaError
from gemini_core.domain.request import FunctionDeclaration, Schema
from .definitions import ToolSpec

TYPE_NAMES = {
    "typeunspecified": "TYPE_UNSPECIFIED",
    "type_unspecified": "TYPE_UNSPECIFIED",
    "string": "STRING",
    "number": "NUMBER",
    "integer": "INTEGER",
    "boolean": "BOOLEAN",
    "array": "ARRAY",
    "object": "OBJECT",
    "null": "NULL",
}

UNSUPPORTED_KEYS = ("$ref", "allOf", "oneOf", "not", "if", "patternProperties")

# JSON schema 中以整数表示、接口中以 int64 字符串表示的字段
COUNT_FIELDS = {
    "minItems": "min_items",
    "maxItems": "max_items",
    "minProperties": "min_properties",
    "maxProperties": "max_properties",
    "minLength": "min_length",
    "maxLength": "max_length",
}


def _error(path: str, message: str) -> SchemaError:
    return SchemaError(code="SCHEMA_ERROR", message=f"{path}: {message}", path=path)


def _map_type(raw: Any, path: str) -> Tuple[str, Optional[bool]]:
    if raw is None:
        return "TYPE_UNSPECIFIED", None
    if isinstance(raw, list):
        members = [t for t in raw if t != "null"]
        if len(members) != 1:
            raise _error(path, f"type union {raw!r} is not supported")
        mapped, _ = _map_type(members[0], path)
        return mapped, (True if "null" in raw else None)
    if not isinstance(raw, str):
        raise _error(path, f"type must be a string, got {type(raw).__name__}")
    mapped = TYPE_NAMES.get(raw.lower())
    if mapped is None:
        raise _error(path, f"unknown type {raw!r}")
    return mapped, None


def _count(value: Any, path: str, key: str) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise _error(path, f"{key} must be an integer")
    try:
        return str(int(value))
    except ValueError:
        raise _error(path, f"{key} must be an integer") from None


def _number(value: Any, path: str, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _error(path, f"{key} must be a number")
    return float(value)


def schema_from_json(node: Any, path: str = "$") -> Schema:
    """递归转换一个 JSON schema 节点。"""

    if not isinstance(node, dict):
        raise _error(path, "schema node must be an object")
    for key in UNSUPPORTED_KEYS:
        if key in node:
            raise _error(path, f"{key} is not supported")

    schema_type, nullable = _map_type(node.get("type"), path)
    schema = Schema(type=schema_type)
    if nullable is not None:
        schema.nullable = nullable
    if "nullable" in node:
        schema.nullable = bool(node["nullable"])

    for key in ("format", "title", "description", "pattern"):
        if key in node and node[key] is not None:
            if not isinstance(node[key], str):
                raise _error(path, f"{key} must be a string")
            setattr(schema, key, node[key])

    if "enum" in node:
        values = node["enum"]
        if not isinstance(values, list):
            raise _error(path, "enum must be a list")
        enum: List[str] = []
        for value in values:
            if value is None:
                schema.nullable = True
                continue
            if isinstance(value, (dict, list)):
                raise _error(path, "enum members must be scalars")
            enum.append(str(value))
        schema.enum = enum

    for key, attr in COUNT_FIELDS.items():
        if key in node:
            setattr(schema, attr, _count(node[key], path, key))
    for key in ("minimum", "maximum"):
        if key in node:
            setattr(schema, key, _number(node[key], path, key))

    if "example" in node:
        schema.example = node["example"]
    if "default" in node:
        schema.default = node["default"]

    if "properties" in node:
        props = node["properties"]
        if not isinstance(props, dict):
            raise _error(path, "properties must be an object")
        schema.properties = {
            name: schema_from_json(sub, f"{path}.properties.{name}") for name, sub in props.items()
        }
        if schema.type == "TYPE_UNSPECIFIED":
            schema.type = "OBJECT"
    if "required" in node:
        required = node["required"]
        if not isinstance(required, list) or not all(isinstance(r, str) for r in required):
            raise _error(path, "required must be a list of strings")
        schema.required = list(required)
    if "propertyOrdering" in node:
        schema.property_ordering = [str(p) for p in node["propertyOrdering"]]

    if "items" in node:
        schema.items = schema_from_json(node["items"], f"{path}.items")
    if "anyOf" in node:
        options = node["anyOf"]
        if not isinstance(options, list):
            raise _error(path, "anyOf must be a list")
        schema.any_of = [schema_from_json(sub, f"{path}.anyOf[{i}]") for i, sub in enumerate(options)]

    if schema.type == "ARRAY" and schema.items is None:
        raise _error(path, "array schema requires items")
    return schema


def declaration_from_spec(spec: ToolSpec) -> FunctionDeclaration:
    """把协作方声明的工具转换为 FunctionDeclaration。

    无参数的工具（空 properties）不发送 parameters 字段，接口不接受空 OBJECT。
    """

    parameters: Optional[Schema] = None
    raw: Dict[str, Any] = spec.input_schema or {}
    if raw:
        parameters = schema_from_json(raw, f"{spec.name}")
        if parameters.type == "OBJECT" and not parameters.properties:
            parameters = None
    return FunctionDeclaration(
        name=spec.name,
        description=spec.description or "None",
        parameters=parameters,
    )

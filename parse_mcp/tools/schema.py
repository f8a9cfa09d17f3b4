"""
Schema tools: inspect and change class definitions.

Every schema endpoint requires the master key.
"""

from typing import Annotated, Any

from fastmcp.tools.tool import ToolResult
from pydantic import BaseModel, Field

from parse_mcp import operations
from parse_mcp.client import ParseClient
from parse_mcp.tools.base import ToolRegistrar, text_result

ClassName = Annotated[str, Field(description="Parse class name")]
FIELD_TYPES = "String, Number, Boolean, Date, File, GeoPoint, Pointer, Relation, Array, Object"


class FieldDefinition(BaseModel):
    type: str = Field(description=f"Field type ({FIELD_TYPES})")
    targetClass: str | None = Field(default=None, description="Target class for Pointer or Relation")
    required: bool | None = Field(default=None, description="Whether the field is required")
    defaultValue: Any = Field(default=None, description="Default value")


Fields = dict[str, FieldDefinition]
ClassLevelPermissions = Annotated[
    dict[str, Any] | None, Field(description="Class Level Permissions (CLP)")
]


def fields_to_wire(fields: Fields) -> dict[str, dict[str, Any]]:
    """Only the attributes the caller actually sent are forwarded."""
    return {name: definition.model_dump(exclude_unset=True) for name, definition in fields.items()}


def register_schema_tools(tools: ToolRegistrar, client: ParseClient) -> None:
    @tools.tool(
        "parse_get_schemas",
        "List the schema of every class: names, fields, types and permissions. Requires the master key.",
    )
    async def parse_get_schemas() -> ToolResult:
        """GET /schemas."""
        return text_result(await client.request("/schemas", use_master_key=True))

    @tools.tool(
        "parse_get_schema",
        "Get the full schema of one class: fields, types, relations and class level "
        "permissions (CLP). Requires the master key.",
    )
    async def parse_get_schema(className: ClassName) -> ToolResult:
        """GET /schemas/<class>."""
        return text_result(await client.request(f"/schemas/{className}", use_master_key=True))

    @tools.tool(
        "parse_create_class",
        "Create a new class with its fields (name: {type, targetClass, required, "
        "defaultValue}) and optional classLevelPermissions. Requires the master key.",
    )
    async def parse_create_class(
        className: Annotated[str, Field(description="Name of the class to create")],
        fields: Annotated[Fields, Field(description="Schema fields")],
        classLevelPermissions: ClassLevelPermissions = None,
    ) -> ToolResult:
        """POST /schemas. Only the field attributes the caller set are sent."""
        payload: dict[str, Any] = {"className": className, "fields": fields_to_wire(fields)}
        if classLevelPermissions:
            payload["classLevelPermissions"] = classLevelPermissions
        return text_result(
            await client.request_json("/schemas", "POST", payload, use_master_key=True)
        )

    @tools.tool(
        "parse_update_schema",
        "Change the schema of an existing class: add fields or replace its class level "
        "permissions (CLP). Fields cannot be removed here (use parse_delete_field). "
        "Requires the master key.",
    )
    async def parse_update_schema(
        className: ClassName,
        fields: Annotated[Fields | None, Field(description="Fields to add or modify")] = None,
        classLevelPermissions: ClassLevelPermissions = None,
    ) -> ToolResult:
        """PUT /schemas/<class> with whichever of fields and CLP were given."""
        payload: dict[str, Any] = {}
        if fields:
            payload["fields"] = fields_to_wire(fields)
        if classLevelPermissions:
            payload["classLevelPermissions"] = classLevelPermissions
        return text_result(
            await client.request_json(f"/schemas/{className}", "PUT", payload, use_master_key=True)
        )

    @tools.tool(
        "parse_delete_class",
        "Permanently delete a class. Parse refuses while the class still holds objects. "
        "This cannot be undone. Requires the master key.",
    )
    async def parse_delete_class(
        className: Annotated[str, Field(description="Name of the class to delete")],
    ) -> ToolResult:
        """DELETE /schemas/<class>."""
        return text_result(
            await client.request(f"/schemas/{className}", method="DELETE", use_master_key=True)
        )

    @tools.tool(
        "parse_add_field",
        "Add a field to an existing class. Give fieldName and fieldType, plus targetClass "
        "for Pointer/Relation and optionally required/defaultValue. Requires the master key.",
    )
    async def parse_add_field(
        className: ClassName,
        fieldName: Annotated[str, Field(description="Name of the new field")],
        fieldType: Annotated[str, Field(description=f"Field type ({FIELD_TYPES})")],
        targetClass: Annotated[str | None, Field(description="Target class for Pointer or Relation")] = None,
        required: Annotated[bool | None, Field(description="Whether the field is required")] = None,
        defaultValue: Annotated[Any, Field(description="Default value")] = None,
    ) -> ToolResult:
        """PUT /schemas/<class> with a single new field definition."""
        definition: dict[str, Any] = {"type": fieldType}
        if targetClass:
            definition["targetClass"] = targetClass
        if required is not None:
            definition["required"] = required
        if defaultValue is not None:
            definition["defaultValue"] = defaultValue

        payload = {"fields": {fieldName: definition}}
        return text_result(
            await client.request_json(f"/schemas/{className}", "PUT", payload, use_master_key=True)
        )

    @tools.tool(
        "parse_delete_field",
        "Permanently remove a field from a class. Its data is lost on every object. "
        "Requires the master key.",
    )
    async def parse_delete_field(
        className: ClassName,
        fieldName: Annotated[str, Field(description="Name of the field to delete")],
    ) -> ToolResult:
        """PUT /schemas/<class> marking the field {"__op": "Delete"}."""
        payload = {"fields": {fieldName: operations.delete()}}
        return text_result(
            await client.request_json(f"/schemas/{className}", "PUT", payload, use_master_key=True)
        )

"""
Write tools: create, update and delete objects, batches and atomic field operations.

parse_create_object and parse_update_object pass their data through
normalize(), so callers can write links as plain {"className", "objectId"}
literals. The atomic tools (increment, add/remove array values) build their
operation envelope directly and never normalize.
"""

from typing import Annotated, Any, Literal

from fastmcp.tools.tool import ToolResult
from pydantic import BaseModel, Field

from parse_mcp import operations
from parse_mcp.client import ParseClient
from parse_mcp.normalize import normalize
from parse_mcp.tools.base import ToolRegistrar, text_result

ClassName = Annotated[str, Field(description="Parse class name")]
ObjectId = Annotated[str, Field(description="objectId of the record")]
FieldName = Annotated[str, Field(description="Name of the field to modify")]

# Array operations only accept JSON primitives.
Primitive = str | int | float | bool | None


class BatchRequest(BaseModel):
    method: Literal["POST", "PUT", "DELETE"] = Field(description="HTTP method")
    path: str = Field(description="Relative path, e.g. /classes/MyClass/objectId")
    body: dict[str, Any] | None = Field(default=None, description="Payload for POST/PUT")

    def to_wire(self) -> dict[str, Any]:
        # Body values are passed through untouched, nulls included.
        wire: dict[str, Any] = {"method": self.method, "path": self.path}
        if self.body is not None:
            wire["body"] = self.body
        return wire


def register_write_tools(tools: ToolRegistrar, client: ParseClient) -> None:
    @tools.tool(
        "parse_create_object",
        "Create a new object in a class. Fields shaped like "
        '{"className": ..., "objectId": ...} become Pointers and arrays of them become '
        "Relation additions. Returns the objectId of the new object.",
    )
    async def parse_create_object(
        className: ClassName,
        data: Annotated[dict[str, Any], Field(description="Fields of the new object")],
    ) -> ToolResult:
        """Normalizes reference literals, then POST /classes/<class>."""
        result = await client.request_json(f"/classes/{className}", "POST", normalize(data))
        return text_result(result)

    @tools.tool(
        "parse_update_object",
        "Update fields of an existing object. Only the given fields change; pointer "
        "and relation literals are converted the same way as in parse_create_object.",
    )
    async def parse_update_object(
        className: ClassName,
        objectId: ObjectId,
        data: Annotated[dict[str, Any], Field(description="Fields to update")],
    ) -> ToolResult:
        """Normalizes reference literals, then PUT /classes/<class>/<id>."""
        result = await client.request_json(
            f"/classes/{className}/{objectId}", "PUT", normalize(data)
        )
        return text_result(result)

    @tools.tool("parse_delete_object", "Permanently delete one object.")
    async def parse_delete_object(className: ClassName, objectId: ObjectId) -> ToolResult:
        """DELETE /classes/<class>/<id>."""
        return text_result(
            await client.request(f"/classes/{className}/{objectId}", method="DELETE")
        )

    @tools.tool(
        "parse_batch",
        "Run several POST/PUT/DELETE operations in one call. Each entry has a method, "
        "a path and an optional body. Parse returns one success or error item per entry.",
    )
    async def parse_batch(
        requests: Annotated[list[BatchRequest], Field(description="Operations to execute")],
    ) -> ToolResult:
        """POST /batch. Parse runs the entries in order and reports each one separately."""
        payload = {"requests": [r.to_wire() for r in requests]}
        return text_result(await client.request_json("/batch", "POST", payload))

    @tools.tool(
        "parse_increment_field",
        "Atomically increment a numeric field (use a negative amount to decrement). "
        "Handy for counters and scores. amount defaults to 1.",
    )
    async def parse_increment_field(
        className: ClassName,
        objectId: ObjectId,
        fieldName: FieldName,
        amount: Annotated[int | float, Field(description="Amount to add (default 1)")] = 1,
    ) -> ToolResult:
        """Sends an Increment operation for a single field."""
        data = {fieldName: operations.increment(amount)}
        return text_result(
            await client.request_json(f"/classes/{className}/{objectId}", "PUT", data)
        )

    @tools.tool(
        "parse_add_to_array",
        "Atomically append values to an array field. With unique=true, values already "
        "present are skipped (AddUnique). Only primitive values are accepted.",
    )
    async def parse_add_to_array(
        className: ClassName,
        objectId: ObjectId,
        fieldName: FieldName,
        values: Annotated[
            list[Primitive],
            Field(min_length=1, description="Primitive values to add (string, number, boolean, null)"),
        ],
        unique: Annotated[bool, Field(description="Use AddUnique")] = False,
    ) -> ToolResult:
        """Sends Add, or AddUnique when unique is set."""
        data = {fieldName: operations.add(values, unique=unique)}
        return text_result(
            await client.request_json(f"/classes/{className}/{objectId}", "PUT", data)
        )

    @tools.tool(
        "parse_remove_from_array",
        "Atomically remove every occurrence of the given primitive values from an array field.",
    )
    async def parse_remove_from_array(
        className: ClassName,
        objectId: ObjectId,
        fieldName: FieldName,
        values: Annotated[
            list[Primitive],
            Field(min_length=1, description="Primitive values to remove (string, number, boolean, null)"),
        ],
    ) -> ToolResult:
        """Sends a Remove operation for a single field."""
        data = {fieldName: operations.remove(values)}
        return text_result(
            await client.request_json(f"/classes/{className}/{objectId}", "PUT", data)
        )

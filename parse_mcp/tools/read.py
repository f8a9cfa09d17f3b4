"""Read-only tools: fetch, query, count and aggregate objects."""

from typing import Annotated, Any

from fastmcp.tools.tool import ToolResult
from pydantic import Field

from parse_mcp.client import ParseClient, build_path, dumps_compact
from parse_mcp.tools.base import ToolRegistrar, text_result

ClassName = Annotated[str, Field(description='Parse class name, e.g. "PatientRecord"')]
Include = Annotated[
    str | None, Field(description='Pointer fields to include, comma separated (e.g. "user,category")')
]
Where = Annotated[
    dict[str, Any] | None,
    Field(description='Parse where clause, e.g. {"isActive": true} or {"score": {"$gt": 10}}'),
]


def register_read_tools(tools: ToolRegistrar, client: ParseClient) -> None:
    @tools.tool(
        "parse_get_object",
        "Fetch a single object from Parse Server by className and objectId. "
        "Use it to retrieve one record when its id is known.",
    )
    async def parse_get_object(
        className: ClassName,
        objectId: Annotated[str, Field(description="objectId of the record")],
        include: Include = None,
    ) -> ToolResult:
        """GET /classes/<class>/<id>, optionally resolving pointer fields."""
        path = build_path(f"/classes/{className}/{objectId}", {"include": include or None})
        return text_result(await client.request(path))

    @tools.tool(
        "parse_query",
        "Query objects of a class. Supports a where filter (Parse query syntax: "
        '{"field": "value"} for equality, {"field": {"$gt": 10}} for comparisons), '
        "ordering, pagination (limit/skip), field selection (keys), pointer "
        "inclusion (include) and an optional total count.",
    )
    async def parse_query(
        className: ClassName,
        where: Where = None,
        limit: Annotated[int | None, Field(ge=1, le=1000, description="Max records (1-1000)")] = None,
        skip: Annotated[int | None, Field(ge=0, description="Records to skip, for pagination")] = None,
        order: Annotated[
            str | None, Field(description='Sort field, "-" prefix for descending (e.g. "-createdAt")')
        ] = None,
        keys: Annotated[str | None, Field(description='Comma separated fields to return (e.g. "name,email")')] = None,
        include: Include = None,
        count: Annotated[bool | None, Field(description="When true, include the total result count")] = None,
    ) -> ToolResult:
        """GET /classes/<class> with the given constraints as query parameters."""
        params = {
            "where": dumps_compact(where) if where else None,
            "limit": limit or None,
            "skip": skip or None,
            "order": order or None,
            "keys": keys or None,
            "include": include or None,
            "count": 1 if count else None,
        }
        return text_result(await client.request(build_path(f"/classes/{className}", params)))

    @tools.tool(
        "parse_get_relation",
        "Return the related objects stored in a Relation (or Pointer) field of one object. "
        "Only the value of that field is returned.",
    )
    async def parse_get_relation(
        className: Annotated[str, Field(description="Owning class, e.g. _Role")],
        objectId: Annotated[str, Field(description="objectId of the owning object")],
        relationField: Annotated[str, Field(description="Relation field, e.g. permissions")],
    ) -> ToolResult:
        """
        Fetches the owning object with the field included and returns only that
        field's value (null when absent).
        """
        data = await client.request(
            build_path(f"/classes/{className}/{objectId}", {"include": relationField})
        )
        return text_result(data.get(relationField))

    @tools.tool(
        "parse_count",
        "Count the objects of a class, optionally only those matching a where filter.",
    )
    async def parse_count(className: ClassName, where: Where = None) -> ToolResult:
        """Asks Parse for count=1&limit=0 so only the total comes back."""
        params = {"count": 1, "limit": 0, "where": dumps_compact(where) if where else None}
        data = await client.request(build_path(f"/classes/{className}", params))
        return text_result({"count": data.get("count")})

    @tools.tool(
        "parse_aggregate",
        "Run a MongoDB-style aggregation pipeline ($match, $group, $sort, $project, ...) "
        "over a class. Requires the master key.",
    )
    async def parse_aggregate(
        className: ClassName,
        pipeline: Annotated[list[dict[str, Any]], Field(description="Aggregation pipeline stages")],
    ) -> ToolResult:
        """POST /aggregate/<class> with {"pipeline": [...]}."""
        data = await client.request_json(
            f"/aggregate/{className}", "POST", {"pipeline": pipeline}, use_master_key=True
        )
        return text_result(data)

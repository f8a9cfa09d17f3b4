"""
Relation tools: edit and explore many-to-many Relation fields.

parse_query_relation and parse_get_class_relations make two sequential calls:
the first reads the class schema to learn where a field points, the second
reads the data.
"""

from typing import Annotated, Any

from fastmcp.tools.tool import ToolResult
from pydantic import Field

from parse_mcp import operations
from parse_mcp.client import ParseClient, build_path, dumps_compact
from parse_mcp.errors import RelationLookupError
from parse_mcp.tools.base import ToolRegistrar, text_result

RELATION_TYPES = ("Pointer", "Relation")

ClassName = Annotated[str, Field(description="Class that owns the relation field")]
ObjectId = Annotated[str, Field(description="objectId of the owning object")]
RelationField = Annotated[str, Field(description="Name of the Relation field")]
TargetClassName = Annotated[str, Field(description="Class of the related objects")]


def relation_fields(schema: dict[str, Any]) -> list[dict[str, Any]]:
    """Pointer and Relation fields of a /schemas/<class> response."""
    return [
        {"field": name, "type": definition.get("type"), "targetClass": definition.get("targetClass")}
        for name, definition in (schema.get("fields") or {}).items()
        if definition.get("type") in RELATION_TYPES
    ]


def register_relation_tools(tools: ToolRegistrar, client: ParseClient) -> None:
    @tools.tool(
        "parse_add_relation",
        "Add objects to a Relation field (many-to-many link). Give the owning object "
        "(className, objectId), the relation field, the class of the related objects and "
        "their objectIds.",
    )
    async def parse_add_relation(
        className: ClassName,
        objectId: ObjectId,
        relationField: RelationField,
        targetClassName: TargetClassName,
        objectIds: Annotated[list[str], Field(description="objectIds to add to the relation")],
    ) -> ToolResult:
        """PUT an AddRelation of Pointers to the target class."""
        payload = {relationField: operations.add_relation(targetClassName, objectIds)}
        result = await client.request_json(
            f"/classes/{className}/{objectId}", "PUT", payload, use_master_key=True
        )
        return text_result(
            {
                "success": True,
                "message": f"Added {len(objectIds)} object(s) to relation '{relationField}'",
                "result": result,
            }
        )

    @tools.tool(
        "parse_remove_relation",
        "Remove objects from a Relation field. Give the owning object (className, "
        "objectId), the relation field, the class of the related objects and their objectIds.",
    )
    async def parse_remove_relation(
        className: ClassName,
        objectId: ObjectId,
        relationField: RelationField,
        targetClassName: TargetClassName,
        objectIds: Annotated[list[str], Field(description="objectIds to remove from the relation")],
    ) -> ToolResult:
        """PUT a RemoveRelation of Pointers to the target class."""
        payload = {relationField: operations.remove_relation(targetClassName, objectIds)}
        result = await client.request_json(
            f"/classes/{className}/{objectId}", "PUT", payload, use_master_key=True
        )
        return text_result(
            {
                "success": True,
                "message": f"Removed {len(objectIds)} object(s) from relation '{relationField}'",
                "result": result,
            }
        )

    @tools.tool(
        "parse_query_relation",
        "List the objects linked through a Relation field, with optional where filter, "
        "ordering and pagination.",
    )
    async def parse_query_relation(
        className: ClassName,
        objectId: ObjectId,
        relationField: RelationField,
        where: Annotated[dict[str, Any] | None, Field(description="Extra where constraints")] = None,
        order: Annotated[
            str | None, Field(description='Sort field, "-" prefix for descending (e.g. "-createdAt")')
        ] = None,
        limit: Annotated[int | None, Field(description="Max results (Parse default: 100)")] = None,
        skip: Annotated[int | None, Field(description="Results to skip, for pagination")] = None,
    ) -> ToolResult:
        """
        Resolves the field's targetClass from the schema, then queries that class
        with a $relatedTo constraint merged into where.

        Raises:
            RelationLookupError: the schema has no targetClass for the field.
        """
        schema = await client.request(f"/schemas/{className}", use_master_key=True)
        target_class = ((schema.get("fields") or {}).get(relationField) or {}).get("targetClass")
        if not target_class:
            raise RelationLookupError(
                f"Could not determine the target class of relation field '{relationField}'"
            )

        constraint = {
            "$relatedTo": {
                "object": operations.pointer(className, objectId),
                "key": relationField,
            }
        }
        params = {
            "where": dumps_compact({**constraint, **(where or {})}),
            "order": order or None,
            "limit": limit or None,
            "skip": skip or None,
        }
        data = await client.request(
            build_path(f"/classes/{target_class}", params), use_master_key=True
        )
        results = data.get("results") or []
        return text_result({"count": len(results), "results": results})

    @tools.tool(
        "parse_get_class_relations",
        "List the Pointer and Relation fields of a class with their target classes. "
        "When objectId is given, also fetch that object with its pointers included. "
        "Requires the master key.",
    )
    async def parse_get_class_relations(
        className: Annotated[str, Field(description="Parse class name")],
        objectId: Annotated[
            str | None, Field(description="Optional object to fetch with its pointers resolved")
        ] = None,
    ) -> ToolResult:
        """Reads /schemas/<class>. With an objectId, also GET the object with every Pointer field included."""
        schema = await client.request(f"/schemas/{className}", use_master_key=True)
        relations = relation_fields(schema)
        if not objectId:
            return text_result({"className": className, "relations": relations})

        pointers = ",".join(r["field"] for r in relations if r["type"] == "Pointer")
        data = await client.request(
            build_path(f"/classes/{className}/{objectId}", {"include": pointers or None})
        )
        return text_result({"className": className, "relations": relations, "object": data})

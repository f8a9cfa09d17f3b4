"""
Security tools: roles, users and class level permissions.

Role and CLP management always asks for the master key. Creating a user uses
the default key tier, the same as a client-side sign-up would.
"""

from typing import Annotated, Any

from fastmcp.tools.tool import ToolResult
from pydantic import BaseModel, Field

from parse_mcp import operations
from parse_mcp.client import ParseClient, build_path, dumps_compact
from parse_mcp.tools.base import ToolRegistrar, text_result

RoleId = Annotated[str, Field(description="objectId of the role")]
UserIds = Annotated[list[str], Field(description="objectIds of the users")]
Limit = Annotated[int | None, Field(description="Max results")]


class ClassLevelPermissions(BaseModel):
    """Each entry maps "*", "requiresAuthentication" or "role:Name" to a boolean."""

    get: dict[str, bool] | None = None
    find: dict[str, bool] | None = None
    create: dict[str, bool] | None = None
    update: dict[str, bool] | None = None
    delete: dict[str, bool] | None = None
    addField: dict[str, bool] | None = None


def _list_path(path: str, where: dict[str, Any] | None, limit: int | None) -> str:
    return build_path(
        path, {"where": dumps_compact(where) if where else None, "limit": limit or None}
    )


def register_security_tools(tools: ToolRegistrar, client: ParseClient) -> None:
    # --- Roles ---

    @tools.tool(
        "parse_create_role",
        "Create a role for access control. ACL is mandatory, e.g. "
        '{"name": "Administrator", "ACL": {"*": {"read": true}, '
        '"role:Admin": {"read": true, "write": true}}}. Optionally seed the role with '
        "user objectIds and parent role objectIds. Requires the master key.",
    )
    async def parse_create_role(
        name: Annotated[str, Field(description="Role name")],
        ACL: Annotated[dict[str, Any], Field(description="Access Control List of the role")],
        users: Annotated[list[str] | None, Field(description="objectIds of member users")] = None,
        roles: Annotated[list[str] | None, Field(description="objectIds of member roles")] = None,
    ) -> ToolResult:
        """POST /roles. Initial members are linked as AddRelation operations on users and roles."""
        payload: dict[str, Any] = {"name": name}
        if ACL:
            payload["ACL"] = ACL
        if users is not None:
            payload["users"] = operations.add_relation(operations.USER_CLASS, users)
        if roles is not None:
            payload["roles"] = operations.add_relation(operations.ROLE_CLASS, roles)
        return text_result(
            await client.request_json("/roles", "POST", payload, use_master_key=True)
        )

    @tools.tool(
        "parse_get_role",
        "Get one role by objectId: name, ACL and metadata. Requires the master key.",
    )
    async def parse_get_role(objectId: RoleId) -> ToolResult:
        """GET /roles/<id>."""
        return text_result(await client.request(f"/roles/{objectId}", use_master_key=True))

    @tools.tool(
        "parse_list_roles",
        'List roles, optionally filtered with where (e.g. {"name": "Admin"}) and limited. '
        "Requires the master key.",
    )
    async def parse_list_roles(
        where: Annotated[dict[str, Any] | None, Field(description='Filter, e.g. {"name": "Admin"}')] = None,
        limit: Limit = None,
    ) -> ToolResult:
        """GET /roles with optional where and limit."""
        return text_result(
            await client.request(_list_path("/roles", where, limit), use_master_key=True)
        )

    @tools.tool(
        "parse_update_role",
        "Rename a role or replace its ACL. Membership is managed with "
        "parse_add_users_to_role / parse_remove_users_from_role. Requires the master key.",
    )
    async def parse_update_role(
        objectId: RoleId,
        name: Annotated[str | None, Field(description="New role name")] = None,
        ACL: Annotated[dict[str, Any] | None, Field(description="New ACL")] = None,
    ) -> ToolResult:
        """PUT /roles/<id> with the new name and/or ACL."""
        payload: dict[str, Any] = {}
        if name:
            payload["name"] = name
        if ACL:
            payload["ACL"] = ACL
        return text_result(
            await client.request_json(f"/roles/{objectId}", "PUT", payload, use_master_key=True)
        )

    @tools.tool(
        "parse_delete_role",
        "Permanently delete a role. Its members lose the permissions granted through it. "
        "Requires the master key.",
    )
    async def parse_delete_role(objectId: RoleId) -> ToolResult:
        """DELETE /roles/<id>."""
        return text_result(
            await client.request(f"/roles/{objectId}", method="DELETE", use_master_key=True)
        )

    @tools.tool(
        "parse_add_users_to_role",
        "Add users (by objectId) to an existing role. Requires the master key.",
    )
    async def parse_add_users_to_role(roleId: RoleId, userIds: UserIds) -> ToolResult:
        """AddRelation of _User pointers on the role's users field."""
        payload = {"users": operations.add_relation(operations.USER_CLASS, userIds)}
        return text_result(
            await client.request_json(f"/roles/{roleId}", "PUT", payload, use_master_key=True)
        )

    @tools.tool(
        "parse_remove_users_from_role",
        "Remove users (by objectId) from a role. Requires the master key.",
    )
    async def parse_remove_users_from_role(roleId: RoleId, userIds: UserIds) -> ToolResult:
        """RemoveRelation of _User pointers on the role's users field."""
        payload = {"users": operations.remove_relation(operations.USER_CLASS, userIds)}
        return text_result(
            await client.request_json(f"/roles/{roleId}", "PUT", payload, use_master_key=True)
        )

    # --- Class level permissions ---

    @tools.tool(
        "parse_update_clp",
        "Set class level permissions: who may get, find, create, update, delete or "
        'addField. Use "*" for public, "requiresAuthentication" for signed-in users or '
        '"role:RoleName" for a role. Requires the master key.',
    )
    async def parse_update_clp(
        className: Annotated[str, Field(description="Parse class name")],
        permissions: Annotated[
            ClassLevelPermissions,
            Field(description='Permissions, e.g. {"get": {"*": true}, "find": {"requiresAuthentication": true}}'),
        ],
    ) -> ToolResult:
        """PUT /schemas/<class> with classLevelPermissions. Operations left unset are not sent."""
        payload = {"classLevelPermissions": permissions.model_dump(exclude_none=True)}
        return text_result(
            await client.request_json(f"/schemas/{className}", "PUT", payload, use_master_key=True)
        )

    # --- Users ---

    @tools.tool(
        "parse_create_user",
        "Sign up a new user. username and password are required; email and any "
        "additionalFields are optional. Returns the new sessionToken.",
    )
    async def parse_create_user(
        username: Annotated[str, Field(description="Username")],
        password: Annotated[str, Field(description="Password")],
        email: Annotated[str | None, Field(description="Email address")] = None,
        additionalFields: Annotated[
            dict[str, Any] | None, Field(description="Extra user fields")
        ] = None,
    ) -> ToolResult:
        """POST /users with the default key. An explicit email wins over additionalFields."""
        payload: dict[str, Any] = {"username": username, "password": password}
        payload.update(additionalFields or {})
        if email:
            payload["email"] = email
        return text_result(await client.request_json("/users", "POST", payload))

    @tools.tool(
        "parse_get_user",
        "Get one user by objectId: username, email and custom fields (never the password). "
        "Requires the master key.",
    )
    async def parse_get_user(
        objectId: Annotated[str, Field(description="objectId of the user")],
    ) -> ToolResult:
        """GET /users/<id>."""
        return text_result(await client.request(f"/users/{objectId}", use_master_key=True))

    @tools.tool(
        "parse_list_users",
        'List users, optionally filtered with where (e.g. {"username": "admin"}) and '
        "limited. Requires the master key.",
    )
    async def parse_list_users(
        where: Annotated[dict[str, Any] | None, Field(description='Filter, e.g. {"username": "admin"}')] = None,
        limit: Limit = None,
    ) -> ToolResult:
        """GET /users with optional where and limit."""
        return text_result(
            await client.request(_list_path("/users", where, limit), use_master_key=True)
        )

"""
Builders for Parse REST wire values.

Parse Server distinguishes plain field values from two special shapes:

    Pointer      {"__type": "Pointer", "className": "_User", "objectId": "abc123"}
    Operation    {"__op": "Increment", "amount": 1}

An operation asks the server to mutate a field atomically instead of
overwriting it. Tools that update counters, arrays, relations or schema
fields build their payload with these helpers; the generic normalizer in
parse_mcp.normalize only ever produces Pointer and AddRelation values.
"""

from typing import Any, Iterable

USER_CLASS = "_User"
ROLE_CLASS = "_Role"


def pointer(class_name: str, object_id: str) -> dict[str, str]:
    return {"__type": "Pointer", "className": class_name, "objectId": object_id}


def increment(amount: int | float = 1) -> dict[str, Any]:
    return {"__op": "Increment", "amount": amount}


def add(values: list[Any], unique: bool = False) -> dict[str, Any]:
    return {"__op": "AddUnique" if unique else "Add", "objects": values}


def remove(values: list[Any]) -> dict[str, Any]:
    return {"__op": "Remove", "objects": values}


def add_relation(class_name: str, object_ids: Iterable[str]) -> dict[str, Any]:
    return {"__op": "AddRelation", "objects": [pointer(class_name, i) for i in object_ids]}


def remove_relation(class_name: str, object_ids: Iterable[str]) -> dict[str, Any]:
    return {"__op": "RemoveRelation", "objects": [pointer(class_name, i) for i in object_ids]}


def delete() -> dict[str, str]:
    """Removes a field (on an object) or a column (in a schema update)."""
    return {"__op": "Delete"}

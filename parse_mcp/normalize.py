"""
Relation normalization for object payloads.

Callers describe links to other objects the natural way, as plain literals:

    {"owner": {"className": "_User", "objectId": "u1"},
     "tags":  [{"className": "Tag", "objectId": "t1"},
               {"className": "Tag", "objectId": "t2"}]}

Parse Server expects its own wire format instead:

    {"owner": {"__type": "Pointer", "className": "_User", "objectId": "u1"},
     "tags":  {"__op": "AddRelation", "objects": [<Pointer t1>, <Pointer t2>]}}

normalize() performs that rewrite in a single depth-first pass. classify()
decides which rule applies to a value, so the recursion below is a plain
dispatch over the Shape enum.

Rules:
    REFERENCE              -> Pointer (any keys besides className/objectId are dropped)
    REFERENCE_COLLECTION   -> AddRelation of Pointers, order preserved
    PLAIN_ARRAY            -> each element normalized independently
    PLAIN_OBJECT           -> each value normalized, every key kept
    SCALAR                 -> returned unchanged

A list only becomes a relation when it is non-empty and *every* element is a
reference; mixed lists are recursed element by element.

Known hazard: the output is not a fixed point. A Pointer fed back in still
matches REFERENCE (it comes out equal), but an AddRelation envelope is a plain
object whose "objects" list is a reference collection, so it would be wrapped
a second time.
"""

from enum import Enum
from typing import Any

from parse_mcp.operations import pointer


class Shape(Enum):
    SCALAR = "scalar"
    REFERENCE = "reference"
    REFERENCE_COLLECTION = "reference_collection"
    PLAIN_OBJECT = "plain_object"
    PLAIN_ARRAY = "plain_array"


def is_reference(value: Any) -> bool:
    """True for a dict with non-empty className and objectId."""
    return isinstance(value, dict) and bool(value.get("className")) and bool(value.get("objectId"))


def classify(value: Any) -> Shape:
    if isinstance(value, list):
        if value and all(is_reference(item) for item in value):
            return Shape.REFERENCE_COLLECTION
        return Shape.PLAIN_ARRAY
    if isinstance(value, dict):
        return Shape.REFERENCE if is_reference(value) else Shape.PLAIN_OBJECT
    return Shape.SCALAR


def normalize(value: Any) -> Any:
    """Return a copy of `value` with references rewritten to Parse wire values."""
    shape = classify(value)
    if shape is Shape.REFERENCE_COLLECTION:
        return {
            "__op": "AddRelation",
            "objects": [pointer(item["className"], item["objectId"]) for item in value],
        }
    if shape is Shape.PLAIN_ARRAY:
        return [normalize(item) for item in value]
    if shape is Shape.REFERENCE:
        return pointer(value["className"], value["objectId"])
    if shape is Shape.PLAIN_OBJECT:
        return {key: normalize(item) for key, item in value.items()}
    return value

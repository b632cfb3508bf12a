"""Shared wire models: the camelCase base and the write acknowledgements.

The web client reads ``acknowledged`` / ``insertedId`` / ``modifiedCount`` /
``deletedCount`` from write responses, so those shapes are kept even though
the store underneath is relational.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for request and response bodies.

    JSON is camelCase on the wire, attributes stay snake_case in Python.
    Input is accepted in either spelling.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InsertResult(WireModel):
    acknowledged: bool = True
    inserted_id: str


class UpdateResult(WireModel):
    acknowledged: bool = True
    matched_count: int
    modified_count: int


class DeleteResult(WireModel):
    acknowledged: bool = True
    deleted_count: int


class MessageOut(WireModel):
    message: str


def update_result(matched: bool, modified: bool) -> UpdateResult:
    return UpdateResult(matched_count=int(matched), modified_count=int(modified))


def delete_result(deleted: bool) -> DeleteResult:
    return DeleteResult(deleted_count=int(deleted))

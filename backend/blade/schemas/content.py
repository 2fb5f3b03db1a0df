# blade/schemas/content.py
"""
Pydantic schemas for component and entry endpoints.
Schemas and entry content are opaque JSON; a JSON-encoded string is accepted too.
"""
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

class ComponentCreateIn(BaseModel):
    name: str
    type: str
    schema_: Any = Field(default=None, alias="schema")  # "schema" shadows a BaseModel attribute
    isRoot: bool = False
    isNestable: bool = True
    spaceId: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

class EntryCreateIn(BaseModel):
    slug: Optional[str] = None           # Defaults to "untitled"
    name: Optional[str] = None           # Defaults to "Untitled"
    contentTypeId: Optional[str] = None  # Defaults to the space's "page" type
    content: Any = None
    spaceId: Optional[str] = None        # Defaults to the caller's default space

class EntryUpdateIn(BaseModel):
    """Only fields present in the request body are applied."""
    name: Optional[str] = None
    slug: Optional[str] = None
    content: Any = None
    isPublished: Optional[bool] = None
    spaceId: Optional[str] = None

class ReorderIn(BaseModel):
    entryIds: List[str]
    spaceId: Optional[str] = None

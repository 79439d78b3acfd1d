"""
c4c_odata.api.models - Pydantic models for API requests/responses
==================================================================
"""

from typing import Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field


EXAMPLE_SERVICE = "c4codataapi"
EXAMPLE_ENTITY_SET = "LeadCollection"

Scalar = Union[bool, int, float, str]


class FilterCondition(BaseModel):
    """One comparison added to the $filter builder."""

    field: str = Field(
        description="Property name",
        json_schema_extra={"example": "StatusCode"}
    )
    op: Literal["eq", "ne", "gt", "ge", "lt", "le", "in", "between"] = Field(
        default="eq",
        description="Comparison operator; 'in' and 'between' read 'values'",
    )
    value: Optional[Scalar] = Field(
        default=None,
        description="Comparison value; an explicit null compares with null",
        json_schema_extra={"example": "2"}
    )
    values: Optional[List[Scalar]] = Field(
        default=None,
        description="Values for 'in', or [low, high] for 'between'",
    )
    value_type: Optional[Literal["datetime", "datetimeoffset"]] = Field(
        default=None,
        description="Treat ISO-8601 string values as typed date literals",
    )
    include_boundary: bool = Field(
        default=True,
        description="'between' uses ge/le when true, gt/lt otherwise",
    )


class OrderField(BaseModel):
    field: str
    order: Literal["asc", "desc"] = "desc"


class QueryOptions(BaseModel):
    """System query options; 'conditions' are built into $filter."""

    conditions: List[FilterCondition] = Field(default_factory=list)
    filter: Optional[str] = Field(
        default=None,
        description="Raw $filter, used when no conditions are given",
    )
    select: Optional[List[str]] = Field(
        default=None,
        description="Fields for $select",
        json_schema_extra={"example": ["ObjectID", "Name", "StatusCode"]}
    )
    orderby: Optional[List[OrderField]] = None
    search: Optional[str] = None
    fuzzy: bool = True
    expand: Optional[List[str]] = None
    top: Optional[int] = Field(default=None, ge=0)
    skip: Optional[int] = Field(default=None, ge=0)
    inlinecount: bool = False


class BuildResponse(BaseModel):
    """Built $filter and encoded query string."""

    filter: str
    query: str
    params: Dict[str, str]


class QueryRequest(QueryOptions):
    """Request model for entity set queries."""

    service: str = Field(
        default=EXAMPLE_SERVICE,
        description="OData service name",
        json_schema_extra={"example": EXAMPLE_SERVICE}
    )
    entity_set: str = Field(
        default=EXAMPLE_ENTITY_SET,
        description="Entity set name",
        json_schema_extra={"example": EXAMPLE_ENTITY_SET}
    )
    sap_client: Optional[str] = None
    max_pages: Optional[int] = Field(default=1, ge=1)


class QueryResponse(BaseModel):
    """Response model for OData queries."""

    service: str
    entity_set: str
    count: int
    items: List[Dict[str, Any]]

from __future__ import annotations

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

from core.config import DEFAULT_MAP_YEARS, DEFAULT_SEX, DEFAULT_YEAR


class DashboardFiltersModel(BaseModel):
    diverging_year: int = DEFAULT_YEAR
    sex: str = DEFAULT_SEX
    map_year_1: int = DEFAULT_MAP_YEARS[0]
    map_year_2: int = DEFAULT_MAP_YEARS[1]


class YearChangedModel(BaseModel):
    type: Literal["year_changed"] = "year_changed"
    view: Literal["diverging", "map_year_1", "map_year_2"]
    year: int


class CategoryChangedModel(BaseModel):
    type: Literal["category_changed"] = "category_changed"
    sex: str


class EntityClickedModel(BaseModel):
    type: Literal["entity_clicked"] = "entity_clicked"
    state: Optional[str] = None


class SelectionClearedModel(BaseModel):
    type: Literal["selection_cleared"] = "selection_cleared"


EventModel = Union[YearChangedModel, CategoryChangedModel, EntityClickedModel, SelectionClearedModel]


class EventRequest(BaseModel):
    event: EventModel = Field(discriminator="type")


class MetaYearsResponse(BaseModel):
    years: List[int]
    selectable: List[int]


class MetaListResponse(BaseModel):
    values: List[str]


class SelectionResponse(BaseModel):
    session_id: str
    selected: Optional[str] = None

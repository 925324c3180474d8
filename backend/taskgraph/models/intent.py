"""Pydantic models for renderer intents.

Renderers never mutate the scene directly. They report what the user did as a
typed intent and the session reduces it into new view or simulation state.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from taskgraph.models.view import SortOption, ViewTransform


class SelectIntent(BaseModel):
    """Click on a node or list item."""

    intent_type: Literal["select"] = Field(default="select", alias="intentType")
    task_id: str = Field(alias="taskId")

    model_config = {"populate_by_name": True}


class DragIntent(BaseModel):
    """Pointer drag on a node, reported as deltas in world coordinates."""

    intent_type: Literal["drag"] = Field(default="drag", alias="intentType")
    task_id: str = Field(alias="taskId")
    phase: Literal["start", "move", "end"] = "move"
    dx: float = 0.0
    dy: float = 0.0

    model_config = {"populate_by_name": True}


class ZoomIntent(BaseModel):
    """Pan/zoom gesture; carries the renderer's resulting transform."""

    intent_type: Literal["zoom"] = Field(default="zoom", alias="intentType")
    transform: ViewTransform

    model_config = {"populate_by_name": True}


class FilterIntent(BaseModel):
    """Change of status filter, search term or sort order.

    Fields left unset keep their current value.
    """

    intent_type: Literal["filter"] = Field(default="filter", alias="intentType")
    status_filter: str | None = Field(default=None, alias="statusFilter")
    search_term: str | None = Field(default=None, alias="searchTerm")
    sort_option: SortOption | None = Field(default=None, alias="sortOption")

    model_config = {"populate_by_name": True}


class ResetViewIntent(BaseModel):
    """Reset zoom, clear pins and re-run the layout from the center."""

    intent_type: Literal["reset_view"] = Field(default="reset_view", alias="intentType")

    model_config = {"populate_by_name": True}


Intent = Annotated[
    SelectIntent | DragIntent | ZoomIntent | FilterIntent | ResetViewIntent,
    Field(discriminator="intent_type"),
]


class IntentRequest(BaseModel):
    """Body of the intents endpoint."""

    intent: Intent


class IntentResult(BaseModel):
    """View state after an intent has been applied."""

    selected_task_id: str | None = None
    transform: ViewTransform
    recentered: bool = False

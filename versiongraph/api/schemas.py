"""
Request bodies accepted by the HTTP boundary.

Field names follow the editor's camelCase; aliases map them onto the
engine's snake_case contracts.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..contracts.history import ChangeType, HistoryAction, HistoryEntryInput


class HistoryEntryBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    modifier: str = Field(min_length=1)
    action: HistoryAction
    id: Optional[str] = None
    timestamp: Optional[datetime] = None
    field: Optional[str] = None
    old_value: Optional[str] = Field(default=None, alias="oldValue")
    new_value: Optional[str] = Field(default=None, alias="newValue")
    comment: Optional[str] = None
    version: Optional[str] = None
    change_type: Optional[ChangeType] = Field(default=None, alias="changeType")
    parent_id: Optional[str] = Field(default=None, alias="parentId")
    summary: Optional[str] = None
    difference_summary: Optional[str] = Field(default=None, alias="differenceSummary")

    def to_input(self) -> HistoryEntryInput:
        return HistoryEntryInput(
            modifier=self.modifier,
            action=self.action,
            id=self.id,
            timestamp=self.timestamp,
            field=self.field,
            old_value=self.old_value,
            new_value=self.new_value,
            comment=self.comment,
            version=self.version,
            change_type=self.change_type,
            parent_id=self.parent_id,
            summary=self.summary,
            difference_summary=self.difference_summary,
        )


class FilterBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    search_term: Optional[str] = Field(default=None, alias="searchTerm")
    action_filter: Optional[str] = Field(default=None, alias="actionFilter")


class NodeClickBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    node_id: str = Field(alias="nodeId")
    modifier_held: bool = Field(default=False, alias="modifierHeld")


class MergeBody(BaseModel):
    ids: Optional[List[str]] = None

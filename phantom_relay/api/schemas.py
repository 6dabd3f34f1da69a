"""API request/response schemas."""

from typing import Any

from pydantic import BaseModel, Field


# Search schemas
class SearchRequest(BaseModel):
    company: str | None = Field(default=None, description="Company to search people at")
    titles: list[str] | None = Field(default=None, description="Job titles (optional, defaults apply)")


class RunResponse(BaseModel):
    container_id: str | None = Field(default=None, alias="containerId")
    status: str
    url: str
    error: str | None = None

    class Config:
        populate_by_name = True


class BatchStartedResponse(BaseModel):
    batch_id: str = Field(alias="batchId")
    company: str
    titles: list[str]
    runs: dict[str, RunResponse]

    class Config:
        populate_by_name = True


# Results schemas
class TitleResultsResponse(RunResponse):
    count: int
    results: list[Any]


class BatchResultsResponse(BaseModel):
    batch_id: str = Field(alias="batchId")
    company: str
    titles: list[str]
    all_finished: bool = Field(alias="allFinished")
    merged_count: int = Field(alias="mergedCount")
    merged: list[Any]
    per_title: dict[str, TitleResultsResponse] = Field(alias="perTitle")

    class Config:
        populate_by_name = True


class ErrorResponse(BaseModel):
    error: str
    note: str

"""Pydantic models describing the GitHub REST payloads we rely on."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, TypeAdapter


class GitHubBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RepositoryPayload(GitHubBaseModel):
    name: str
    archived: bool = False


class CustomPropertyValuePayload(GitHubBaseModel):
    property_name: str
    # multi_select properties come back as lists
    value: str | list[str] | None = None


class TeamPayload(GitHubBaseModel):
    slug: str
    name: str | None = None
    permission: str | None = None


class CustomPropertyUpdate(GitHubBaseModel):
    property_name: str
    value: str | None


class CustomPropertyUpdateRequest(GitHubBaseModel):
    properties: list[CustomPropertyUpdate]


RepositoryPage = TypeAdapter(list[RepositoryPayload])
CustomPropertyValues = TypeAdapter(list[CustomPropertyValuePayload])
TeamPage = TypeAdapter(list[TeamPayload])

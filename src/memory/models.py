"""Data models for the memory service."""

from pydantic import BaseModel, Field, field_validator


class MemoryRecord(BaseModel):
    """A memory as returned by the listing endpoint."""

    id: str
    key: str | None = None
    value: str
    tags: list[str] = Field(default_factory=list)
    importance: int = 1
    updated_at: str = ""


class NewMemory(BaseModel):
    """Body of ``POST /memory/{user_id}``."""

    key: str | None = None
    value: str
    tags: list[str] = Field(default_factory=list)
    importance: int = Field(default=1, ge=1, le=5)

    @field_validator("value")
    @classmethod
    def _value_not_empty(cls, v: str) -> str:
        if not v:
            msg = "value is required"
            raise ValueError(msg)
        return v

    @field_validator("tags", "importance", mode="before")
    @classmethod
    def _null_means_default(cls, v, info):
        if v is None:
            return [] if info.field_name == "tags" else 1
        return v

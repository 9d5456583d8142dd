"""Pydantic schemas for the shortener API payloads the harness sends and reads.

Schema Hierarchy
=================
::
    CreateURLRequest (POST /api/v1/urls)
    └─ url: str

    SeedRecord (201 body, one per created URL)
    ├─ short_code: str (non-empty)
    ├─ short_url: str
    └─ original_url: str

    BatchCreateRequest (POST /api/v1/urls/batch)
    └─ urls: list[str]

    BatchCreateResponse
    └─ urls: list[SeedRecord]  (may be shorter than the request)

Key Behaviours
===============
- Unknown response fields are ignored so service-side additions do not break seeding.
- A record without a short code fails validation and is never persisted.
"""

from pydantic import BaseModel, ConfigDict, Field

__all__ = ["BatchCreateRequest", "BatchCreateResponse", "CreateURLRequest", "SeedRecord"]


class CreateURLRequest(BaseModel):
    url: str


class SeedRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    short_code: str = Field(min_length=1)
    short_url: str = ""
    original_url: str = ""


class BatchCreateRequest(BaseModel):
    urls: list[str]


class BatchCreateResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    urls: list[SeedRecord] = Field(default_factory=list)

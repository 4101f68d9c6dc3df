# FILE: cepoka/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------
# 공통 베이스 (Pydantic v2)
# ---------------------------------
class ORMSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ---------------------------------
# Admin / Token
# ---------------------------------
class Token(ORMSchema):
    access_token: str
    token_type: str = "bearer"


# ---------------------------------
# Category
# ---------------------------------
class CategoryOut(ORMSchema):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    name: str
    icon: str
    image_src: str = Field(alias="imageSrc")


class CategoryCreate(ORMSchema):
    name: str = Field(min_length=1)
    icon: str = "✨"


class CategoryUpdate(ORMSchema):
    name: Optional[str] = Field(default=None, min_length=1)
    icon: Optional[str] = None


# ---------------------------------
# Batch reports
# ---------------------------------
class BootstrapReport(ORMSchema):
    success: bool
    message: str
    created: int = 0
    existing: int = 0
    failed: int = 0


class ResetReport(ORMSchema):
    success: bool
    deleted: int = 0
    created: int = 0
    failed: int = 0
    error: Optional[str] = None


class BackfillReport(ORMSchema):
    success: bool
    updated_count: int = 0
    error_count: int = 0
    skipped_count: int = 0
    dry_run: bool = False
    error: Optional[str] = None


# ---------------------------------
# Sitemap
# ---------------------------------
ChangeFrequency = Literal["always", "hourly", "daily", "weekly", "monthly", "yearly", "never"]


class SitemapEntry(ORMSchema):
    url: str
    last_modified: datetime
    change_frequency: ChangeFrequency
    priority: float = Field(ge=0.0, le=1.0)


# ---------------------------------
# Offline edge
# ---------------------------------
class WorkerStatus(ORMSchema):
    cache_name: Optional[str] = None
    state: str = "none"
    precache_urls: List[str] = []
    deleted_caches: List[str] = []


class CacheStoreOut(ORMSchema):
    name: str
    created_at: datetime
    entry_count: int

"""
Pydantic schemas for cluster endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ClusterSummaryRequest(BaseModel):
    cluster_id: str = Field(..., min_length=1)
    language_code: str | None = None

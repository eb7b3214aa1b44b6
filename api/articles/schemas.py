"""
Pydantic schemas for article endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class RelatedArticlesRequest(BaseModel):
    sourceArticleId: int = Field(..., ge=1)

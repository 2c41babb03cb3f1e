"""
JSON reports printed by `embex refs` and `embex outline`.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class EmbedInfo(BaseModel):
    raw: str
    target: str
    alias: Optional[str] = None
    line: int = Field(description="1-based line of the marker in the document")
    outcome: str
    resolved_path: Optional[str] = Field(default=None, alias="resolvedPath")
    section: Optional[str] = None
    line_range: Optional[List[Optional[int]]] = Field(default=None, alias="lineRange")
    fallback: Optional[str] = None
    error: Optional[str] = None

    model_config = {"populate_by_name": True}


class RefsReport(BaseModel):
    document: str
    embeds: List[EmbedInfo] = Field(default_factory=list)


class HeadingInfo(BaseModel):
    text: str
    level: int
    line: int
    slug: str


class BlockInfo(BaseModel):
    id: str
    start_line: int = Field(alias="startLine")
    end_line: int = Field(alias="endLine")

    model_config = {"populate_by_name": True}


class OutlineReport(BaseModel):
    document: str
    frontmatter: Optional[Dict[str, Any]] = None
    headings: List[HeadingInfo] = Field(default_factory=list)
    blocks: List[BlockInfo] = Field(default_factory=list)


__all__ = ["BlockInfo", "EmbedInfo", "HeadingInfo", "OutlineReport", "RefsReport"]

"""Data models for the parse, extract, and validate pipeline"""

from dataclasses import dataclass
from datetime import date as date_type, datetime, time
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator


JEKYLL_DATE_FORMATS = ("%Y-%m-%d %H:%M:%S %z", "%Y-%m-%d %H:%M %z", "%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M")


class BlockType(str, Enum):
    """Types of top-level content blocks in a post body"""
    heading = "heading"
    paragraph = "paragraph"
    list = "list"
    code = "code"
    math = "math"
    table = "table"
    html = "html"
    quote = "quote"
    figure = "figure"
    footer = "footer"


class PostMeta(BaseModel):
    """Front matter contract shared with the site generator. Unknown keys are kept."""
    model_config = ConfigDict(extra="allow")

    title: Optional[str] = None
    date: Optional[datetime] = None
    categories: list[str] = []
    tags: list[str] = []
    slug: Optional[str] = None
    draft: bool = False

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, v: Any) -> Any:
        if isinstance(v, (bool, int, float)):
            # pydantic would read a bare number as a Unix timestamp
            raise ValueError(f"expected a date, got {v!r}")
        if isinstance(v, date_type) and not isinstance(v, datetime):
            return datetime.combine(v, time())
        if isinstance(v, str):
            s = v.strip()
            try:
                return datetime.fromisoformat(s)
            except ValueError:
                pass
            for fmt in JEKYLL_DATE_FORMATS:
                try:
                    return datetime.strptime(s, fmt)
                except ValueError:
                    continue
            raise ValueError(f"unrecognized date '{s}'")
        return v

    @field_validator("categories", "tags", mode="before")
    @classmethod
    def coerce_terms(cls, v: Any) -> Any:
        # Jekyll accepts a space-separated string for both fields
        if v is None:
            return []
        if isinstance(v, str):
            return v.split()
        if isinstance(v, list):
            return [str(t) if isinstance(t, (int, float)) else t for t in v]
        return v

    @property
    def naive_date(self) -> Optional[datetime]:
        """Wall-clock date as stored in the catalog; SQLite drops tzinfo anyway."""
        return self.date.replace(tzinfo=None) if self.date else None


def lenient_meta(frontmatter: dict[str, Any] | None) -> PostMeta:
    """Best-effort PostMeta for cataloging; invalid front matter yields an empty contract."""
    try:
        return PostMeta.model_validate(frontmatter or {})
    except ValidationError:
        return PostMeta()


class ExtractedBlock(BaseModel):
    """A single typed content block from a post body."""
    type: BlockType
    content: str
    line: int                       # 1-based line within the body
    level: Optional[int] = None     # heading level (1-6); None for non-headings
    lang: Optional[str] = None      # fence info language for code blocks
    closed: bool = True             # False for a code fence that runs to end of file


class Reference(BaseModel):
    """A link or image target found in the body."""
    kind: str                       # "link" or "image"
    target: str
    line: Optional[int] = None


class StagedPost(BaseModel):
    """Staging contract: source-faithful content written by extract, read by commit."""
    slug: str
    path: str
    markdown: str                   # body without frontmatter
    hash: str                       # sha256 of the full raw file
    frontmatter: dict[str, Any] = {}
    blocks: list[ExtractedBlock]
    refs: list[Reference] = []


@dataclass
class ParsedPost:
    """Internal parse result carrying markdown-it tokens; not persisted."""
    path:         Path
    slug:         str
    raw_markdown: str          # full file content (includes frontmatter)
    markdown:     str          # body only (frontmatter stripped)
    body_offset:  int          # number of file lines before the body
    hash:         str
    frontmatter:  dict[str, Any]
    tokens:       list         # markdown-it Token objects


class Severity(str, Enum):
    error = "error"
    warning = "warning"


class Issue(BaseModel):
    """A single validation finding for a post."""
    path: str
    severity: Severity
    code: str
    message: str
    line: Optional[int] = None

    def __str__(self) -> str:
        loc = f"{self.path}:{self.line}" if self.line else self.path
        return f"{loc}: {self.severity.value} [{self.code}] {self.message}"


class Report(BaseModel):
    """Validation result for a set of posts."""
    files: int = 0
    issues: list[Issue] = []

    @property
    def errors(self) -> int:
        return sum(1 for i in self.issues if i.severity == Severity.error)

    @property
    def warnings(self) -> int:
        return sum(1 for i in self.issues if i.severity == Severity.warning)

    @property
    def ok(self) -> bool:
        return self.errors == 0

"""Front matter checks against the PostMeta contract"""

from collections import Counter
from datetime import date
from typing import Any

from pydantic import ValidationError

from mdblog.core.models import Issue, PostMeta, Severity
from mdblog.core.utils.slug import slugify


TERM_FIELDS = ("categories", "tags")


def _empty(value: Any) -> bool:
    return value is None or (isinstance(value, (str, list, dict)) and not value)


def check_frontmatter(
    frontmatter: dict[str, Any],
    path: str,
    required_fields: list[str],
    today: date,
    allow_future_dates: bool = False,
    ) -> list[Issue]:
    """Return issues for missing fields, schema violations, future dates, and repeated terms."""
    issues = [
        Issue(path=path, severity=Severity.error, code="frontmatter.missing",
              message=f"required field '{name}' is missing or empty")
        for name in required_fields
        if _empty(frontmatter.get(name))
    ]

    slug = frontmatter.get("slug")
    if slug is not None and str(slug) != slugify(str(slug)):
        issues.append(Issue(path=path, severity=Severity.error, code="frontmatter.invalid",
                            message=f"slug: '{slug}' is not URL-safe (try '{slugify(str(slug))}')"))

    try:
        meta = PostMeta.model_validate(frontmatter)
    except ValidationError as e:
        for err in e.errors():
            loc = ".".join(str(p) for p in err["loc"])
            issues.append(Issue(path=path, severity=Severity.error, code="frontmatter.invalid",
                                message=f"{loc}: {err['msg']}"))
        return issues

    if meta.date and meta.date.date() > today and not (allow_future_dates or meta.draft):
        issues.append(Issue(path=path, severity=Severity.warning, code="frontmatter.future-date",
                            message=f"date {meta.date.date().isoformat()} is in the future"))

    for field in TERM_FIELDS:
        counts = Counter(t.strip().lower() for t in getattr(meta, field))
        for term, n in counts.items():
            if n > 1:
                issues.append(Issue(path=path, severity=Severity.warning, code="frontmatter.duplicate-term",
                                    message=f"{field} lists '{term}' {n} times"))
    return issues

"""Per-post and corpus-wide validation"""

import logging
from datetime import date
from pathlib import Path

from mdblog.config import Settings
from mdblog.core.extract.extract import extract_post
from mdblog.core.extract.refs import heading_anchors
from mdblog.core.models import Issue, ParsedPost, Report, Severity
from mdblog.core.parse import discover_files, parse_file
from mdblog.core.validate.content import check_content
from mdblog.core.validate.frontmatter import check_frontmatter
from mdblog.core.validate.refs import check_refs


logger = logging.getLogger(__name__)


def validate_post(
    path: Path,
    settings: Settings,
    today: date = None,
    ) -> tuple[list[Issue], ParsedPost | None]:
    """Validate one file. Parse failures are reported as issues; the ParsedPost is None then."""
    today = today or date.today()
    try:
        parsed = parse_file(path, settings.parser_config)
    except UnicodeDecodeError as e:
        return [Issue(path=str(path), severity=Severity.error, code="file.encoding", message=str(e))], None
    except ValueError as e:
        return [Issue(path=str(path), severity=Severity.error, code="frontmatter.yaml", message=str(e), line=1)], None

    staged = extract_post(parsed)
    issues = check_frontmatter(
        parsed.frontmatter, str(path), settings.required_fields, today, settings.allow_future_dates,
    )
    issues += check_content(staged.blocks, str(path), parsed.body_offset)
    issues += check_refs(
        staged.refs, path, Path(settings.static_dir), heading_anchors(parsed.tokens), parsed.body_offset,
    )
    logger.debug("validated %s: %d issue(s)", path, len(issues))
    return issues, parsed


def _duplicate_slugs(parsed: list[ParsedPost]) -> list[Issue]:
    first: dict[str, Path] = {}
    issues = []
    for p in parsed:
        if p.slug in first:
            issues.append(Issue(path=str(p.path), severity=Severity.error, code="corpus.duplicate-slug",
                                message=f"slug '{p.slug}' already used by {first[p.slug]}"))
        else:
            first[p.slug] = p.path
    return issues


def validate_corpus(path: Path, settings: Settings, today: date = None) -> Report:
    """Validate every post under path and check slugs are unique across the set."""
    files = discover_files(path)
    issues: list[Issue] = []
    parsed: list[ParsedPost] = []
    for f in files:
        post_issues, post = validate_post(f, settings, today)
        issues += post_issues
        if post is not None:
            parsed.append(post)
    issues += _duplicate_slugs(parsed)
    issues.sort(key=lambda i: (i.path, i.line or 0))
    logger.info("checked %d file(s): %d issue(s)", len(files), len(issues))
    return Report(files=len(files), issues=issues)

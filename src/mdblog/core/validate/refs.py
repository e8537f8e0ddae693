"""Local link and image resolution checks"""

from pathlib import Path
from urllib.parse import unquote, urlsplit

from mdblog.core.models import Issue, Reference, Severity
from mdblog.core.utils.slug import slugify


def is_external(target: str) -> bool:
    """True for targets with a URL scheme (http:, mailto:, data:, ...) or protocol-relative ones."""
    if target.startswith('//'):
        return True
    scheme = urlsplit(target).scheme
    return len(scheme) > 1


def resolve_target(target: str, post_path: Path, static_dir: Path) -> Path | None:
    """Return the filesystem path a local target points at, or None for fragment-only targets."""
    local = unquote(urlsplit(target).path)
    if not local:
        return None
    if local.startswith('/'):
        return static_dir / local.lstrip('/')
    return post_path.parent / local


def check_refs(
    refs: list[Reference],
    post_path: Path,
    static_dir: Path,
    anchors: set[str],
    body_offset: int = 0,
    ) -> list[Issue]:
    """Return issues for local targets that do not exist and fragment links without a heading."""
    issues: list[Issue] = []
    path = str(post_path)

    for ref in refs:
        if is_external(ref.target):
            continue
        line = ref.line + body_offset if ref.line else None
        resolved = resolve_target(ref.target, post_path, static_dir)

        if resolved is None:
            fragment = urlsplit(ref.target).fragment
            if ref.kind == 'link' and fragment and slugify(unquote(fragment)) not in anchors:
                issues.append(Issue(path=path, severity=Severity.warning, code="refs.missing-anchor",
                                    message=f"no heading with id '#{fragment}'", line=line))
            continue

        if resolved.exists():
            continue
        if ref.kind == 'image':
            issues.append(Issue(path=path, severity=Severity.error, code="refs.missing-image",
                                message=f"image '{ref.target}' not found at {resolved}", line=line))
        elif ref.target.startswith('/'):
            # site-absolute pages may only exist after the site is generated
            issues.append(Issue(path=path, severity=Severity.warning, code="refs.unresolved-link",
                                message=f"link '{ref.target}' not found under static dir", line=line))
        else:
            issues.append(Issue(path=path, severity=Severity.error, code="refs.missing-link",
                                message=f"link '{ref.target}' not found at {resolved}", line=line))
    return issues

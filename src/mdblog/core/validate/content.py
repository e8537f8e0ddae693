"""Body checks: code fences, math delimiters, and heading structure"""

import re
from collections import Counter

from mdblog.core.models import BlockType, ExtractedBlock, Issue, Severity


MATH_SCAN_TYPES = {BlockType.paragraph, BlockType.math, BlockType.list, BlockType.quote,
                   BlockType.table, BlockType.heading, BlockType.footer, BlockType.figure}

CODE_SPAN_RE = re.compile(r'(`+)(.+?)\1', re.DOTALL)
ENV_RE = re.compile(r'\\(begin|end)\{([^}]+)\}')


def _code_lines(blocks: list[ExtractedBlock]) -> set[int]:
    """Body line numbers covered by code blocks, including ones nested in lists or quotes."""
    lines: set[int] = set()
    for b in blocks:
        if b.type == BlockType.code:
            lines.update(range(b.line, b.line + b.content.count('\n') + 1))
    return lines


def _math_text(block: ExtractedBlock, code_lines: set[int]) -> str:
    """Block source with nested code, code spans, and escaped dollars removed."""
    kept = [
        text for n, text in enumerate(block.content.splitlines(), start=block.line)
        if n not in code_lines
    ]
    text = CODE_SPAN_RE.sub('', '\n'.join(kept))
    return text.replace('\\$', '')


def check_content(blocks: list[ExtractedBlock], path: str, body_offset: int = 0) -> list[Issue]:
    """Return issues for unclosed fences, unbalanced math, heading skips, and empty bodies."""
    issues: list[Issue] = []

    def _issue(severity: Severity, code: str, message: str, line: int | None) -> None:
        issues.append(Issue(path=path, severity=severity, code=code, message=message,
                            line=line + body_offset if line else None))

    if not blocks:
        _issue(Severity.warning, "content.empty", "post body is empty", None)
        return issues

    prev_level = None
    for b in blocks:
        if b.type == BlockType.code and not b.closed:
            _issue(Severity.error, "content.unclosed-fence", "code fence is never closed", b.line)
        if b.type == BlockType.heading and b.level:
            if prev_level is not None and b.level > prev_level + 1:
                _issue(Severity.warning, "content.heading-skip",
                       f"heading jumps from h{prev_level} to h{b.level}", b.line)
            prev_level = b.level

    code_lines = _code_lines(blocks)
    display_count = 0
    last_display_line = None
    envs: Counter = Counter()
    env_lines: dict[str, int] = {}

    for b in blocks:
        if b.type not in MATH_SCAN_TYPES:
            continue
        text = _math_text(b, code_lines)

        n_display = text.count('$$')
        if n_display:
            display_count += n_display
            last_display_line = b.line

        for kind, name in ENV_RE.findall(text):
            envs[name] += 1 if kind == 'begin' else -1
            env_lines.setdefault(name, b.line)

        if text.replace('$$', '').count('$') % 2:
            _issue(Severity.warning, "math.unbalanced-inline",
                   "odd number of inline '$' delimiters", b.line)

    if display_count % 2:
        _issue(Severity.error, "math.unbalanced-display",
               "odd number of '$$' display math delimiters", last_display_line)

    for name, balance in sorted(envs.items()):
        if balance:
            _issue(Severity.error, "math.unbalanced-env",
                   f"\\begin{{{name}}} / \\end{{{name}}} counts differ by {balance}", env_lines[name])
    return issues

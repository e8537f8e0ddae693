"""Unit tests for core/validate/content.py"""

import pytest

from mdblog.core.extract.blocks import tokens_to_blocks
from mdblog.core.models import Severity
from mdblog.core.validate.content import check_content


def _issues(parser, md: str, offset: int = 0):
    blocks = tokens_to_blocks(parser.parse(md), md.splitlines(keepends=True))
    return check_content(blocks, "post.md", offset)


def _codes(issues):
    return [i.code for i in issues]


def test_clean_post_has_no_issues(parser):
    md = (
        "# Tight binding\n\n"
        "Hopping $t$ couples sites $i$ and $j$.\n\n"
        "$$\nH = -t \\sum_{i} c_i^\\dagger c_{i+1}\n$$\n\n"
        "## Code\n\n"
        "```bash\necho $PATH\n```\n"
    )
    assert _issues(parser, md) == []


def test_empty_body_warns(parser):
    issues = _issues(parser, "\n\n")
    assert _codes(issues) == ["content.empty"]
    assert issues[0].severity == Severity.warning


def test_unclosed_fence_is_error_with_file_line(parser):
    """Line numbers are shifted by the front matter offset."""
    issues = _issues(parser, "Intro.\n\n```python\nloop.run_forever()\n", offset=5)
    assert _codes(issues) == ["content.unclosed-fence"]
    assert issues[0].severity == Severity.error
    assert issues[0].line == 8


def test_unbalanced_display_math(parser):
    issues = _issues(parser, "$$\nE = \\hbar \\omega\n\nMore text.\n")
    assert "math.unbalanced-display" in _codes(issues)


def test_display_math_split_by_blank_line_is_balanced(parser):
    """A $$ block broken into two paragraphs still has an even delimiter count."""
    md = "$$\na = b\n\nc = d\n$$\n"
    assert "math.unbalanced-display" not in _codes(_issues(parser, md))


def test_unbalanced_inline_math_warns(parser):
    issues = _issues(parser, "The gap $\\Delta = 2|t| is open.\n")
    assert _codes(issues) == ["math.unbalanced-inline"]
    assert issues[0].severity == Severity.warning


@pytest.mark.parametrize("md", [
    "Costs \\$5 per run.\n",
    "Use `echo $HOME` in a shell.\n",
    "```\nprice = $5\n```\n",
    "- step\n\n  ```bash\n  export X=$Y$Z$\n  ```\n",
])
def test_dollars_outside_math_are_ignored(parser, md):
    """Escaped dollars, code spans, and code blocks are not math."""
    assert _issues(parser, md) == []


def test_unbalanced_environment(parser):
    md = "\\begin{align}\na &= b\n\nText after.\n"
    issues = _issues(parser, md)
    assert _codes(issues) == ["math.unbalanced-env"]
    assert "align" in issues[0].message


def test_balanced_environment_across_paragraphs(parser):
    md = "\\begin{equation}\nx = 1\n\n\\end{equation}\n"
    assert _issues(parser, md) == []


def test_heading_skip_warns(parser):
    issues = _issues(parser, "# Title\n\n### Too deep\n")
    assert _codes(issues) == ["content.heading-skip"]
    assert "h1 to h3" in issues[0].message


def test_first_heading_may_start_below_h1(parser):
    assert _issues(parser, "## Section\n\n### Sub\n") == []

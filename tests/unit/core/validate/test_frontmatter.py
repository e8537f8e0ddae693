"""Unit tests for core/validate/frontmatter.py and the PostMeta contract"""

from datetime import date, datetime, timedelta, timezone

import pytest

from mdblog.core.models import PostMeta, Severity
from mdblog.core.validate.frontmatter import check_frontmatter


TODAY = date(2024, 6, 1)
REQUIRED = ["title", "date"]


def _codes(issues):
    return [i.code for i in issues]


def _check(fm, **kwargs):
    return check_frontmatter(fm, "post.md", REQUIRED, TODAY, **kwargs)


# --- PostMeta ---

@pytest.mark.parametrize("value,expected", [
    (date(2020, 1, 2), datetime(2020, 1, 2)),
    ("2020-01-02", datetime(2020, 1, 2)),
    ("2020-01-02T10:30:00", datetime(2020, 1, 2, 10, 30)),
    ("2020-01-02 10:30:00 +0800", datetime(2020, 1, 2, 10, 30, tzinfo=timezone(timedelta(hours=8)))),
])
def test_post_meta_date_formats(value, expected):
    """PostMeta accepts YAML dates, ISO strings, and Jekyll-style timestamps."""
    assert PostMeta.model_validate({"date": value}).date == expected


def test_post_meta_terms_from_string():
    """A space-separated string becomes a list of terms."""
    meta = PostMeta.model_validate({"tags": "asyncio debugging", "categories": None})
    assert meta.tags == ["asyncio", "debugging"]
    assert meta.categories == []


def test_post_meta_keeps_extra_keys():
    """Keys outside the contract are preserved."""
    meta = PostMeta.model_validate({"title": "T", "mathjax": True})
    assert meta.model_extra == {"mathjax": True}


# --- check_frontmatter ---

def test_valid_frontmatter_has_no_issues():
    fm = {"title": "Debugging asyncio", "date": date(2024, 1, 1), "tags": ["python"], "categories": ["dev"]}
    assert _check(fm) == []


@pytest.mark.parametrize("fm,missing", [
    ({}, 2),
    ({"title": "", "date": date(2024, 1, 1)}, 1),
    ({"title": "T", "date": None}, 1),
])
def test_missing_required_fields(fm, missing):
    """Absent or empty required fields are errors."""
    issues = _check(fm)
    assert _codes(issues).count("frontmatter.missing") == missing
    assert all(i.severity == Severity.error for i in issues)


def test_required_fields_are_configurable():
    """Fields outside required_fields may be absent."""
    assert check_frontmatter({"title": "T"}, "post.md", ["title"], TODAY) == []


@pytest.mark.parametrize("fm", [
    {"title": "T", "date": "not a date"},
    {"title": ["a", "b"], "date": "2024-01-01"},
    {"title": "T", "date": "2024-01-01", "tags": {"a": 1}},
    {"title": "T", "date": "2024-01-01", "tags": [["nested"]]},
    {"title": "T", "date": 2024},
    {"title": "T", "date": "1717200000"},
    {"title": "T", "date": 1.5},
    {"title": "T", "date": "2024-01-01", "slug": "../../escaped"},
    {"title": "T", "date": "2024-01-01", "slug": "Has Spaces"},
])
def test_schema_violations(fm):
    """Values of the wrong type are reported as frontmatter.invalid."""
    assert "frontmatter.invalid" in _codes(_check(fm))


def test_future_date_warns():
    issues = _check({"title": "T", "date": TODAY + timedelta(days=3)})
    assert _codes(issues) == ["frontmatter.future-date"]
    assert issues[0].severity == Severity.warning


@pytest.mark.parametrize("fm,kwargs", [
    ({"title": "T", "date": date(2030, 1, 1), "draft": True}, {}),
    ({"title": "T", "date": date(2030, 1, 1)}, {"allow_future_dates": True}),
])
def test_future_date_allowed(fm, kwargs):
    """Drafts and allow_future_dates suppress the future-date warning."""
    assert _check(fm, **kwargs) == []


def test_duplicate_terms_warn():
    """Case-insensitive repeats within tags are flagged once per term."""
    fm = {"title": "T", "date": "2024-01-01", "tags": ["Asyncio", "asyncio", "python"]}
    issues = _check(fm)
    assert _codes(issues) == ["frontmatter.duplicate-term"]
    assert "'asyncio' 2 times" in issues[0].message


def test_numeric_date_is_not_a_timestamp():
    """A bare year is rejected instead of being read as seconds since 1970."""
    issues = _check({"title": "T", "date": 2024})
    assert _codes(issues) == ["frontmatter.invalid"]
    assert "date" in issues[0].message


def test_url_safe_slug_passes():
    assert _check({"title": "T", "date": "2024-01-01", "slug": "tight-binding-chain"}) == []

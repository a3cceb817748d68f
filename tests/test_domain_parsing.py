"""Regression tests for shared posting field parsing helpers."""

from __future__ import annotations

from datetime import datetime, timezone

from app.domain import (
    JobPost,
    SyncLogRecord,
    domain_add_months,
    domain_extract_requirements,
    domain_format_timestamp,
    domain_job_post_to_payload,
    domain_map_employment_type,
    domain_parse_salary_range,
    domain_parse_timestamp,
    domain_parse_timestamp_or_now,
)

import pytest


def test_domain_parse_timestamp_accepts_supported_formats() -> None:
    """Parse RFC 3339, naive ISO, epoch, and slash dates into UTC.

    Returns:
        None: Assertions validate parsed timestamps.

    Raises:
        AssertionError: Raised when a supported format is not parsed.
    """

    expected = datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc)

    assert domain_parse_timestamp("2024-03-01T12:30:00Z") == expected
    assert domain_parse_timestamp("2024-03-01T14:30:00+02:00") == expected
    assert domain_parse_timestamp("2024-03-01 12:30:00") == expected
    assert domain_parse_timestamp(int(expected.timestamp())) == expected
    assert domain_parse_timestamp("2024/03/01") == datetime(2024, 3, 1, tzinfo=timezone.utc)


def test_domain_parse_timestamp_rejects_unsupported_values() -> None:
    """Return None for blank, boolean, and garbage inputs.

    Returns:
        None: Assertions validate rejection behavior.

    Raises:
        AssertionError: Raised when unsupported input is parsed.
    """

    assert domain_parse_timestamp(None) is None
    assert domain_parse_timestamp("") is None
    assert domain_parse_timestamp(True) is None
    assert domain_parse_timestamp("yesterday") is None


def test_domain_parse_timestamp_or_now_falls_back_to_fetch_time() -> None:
    """Use the fetch timestamp when the source date is unusable.

    Returns:
        None: Assertions validate fallback behavior.

    Raises:
        AssertionError: Raised when fallback is not applied.
    """

    fetched_at = datetime(2024, 5, 5, tzinfo=timezone.utc)

    assert domain_parse_timestamp_or_now("not a date", fetched_at) == fetched_at
    assert domain_parse_timestamp_or_now(None, fetched_at) == fetched_at


def test_domain_add_months_clamps_day_of_month() -> None:
    """Clamp to the last day of a shorter target month.

    Returns:
        None: Assertions validate month arithmetic.

    Raises:
        AssertionError: Raised when clamping is wrong.
    """

    assert domain_add_months(datetime(2024, 1, 31, tzinfo=timezone.utc), 1) == datetime(
        2024, 2, 29, tzinfo=timezone.utc
    )
    assert domain_add_months(datetime(2024, 11, 15, tzinfo=timezone.utc), 2) == datetime(
        2025, 1, 15, tzinfo=timezone.utc
    )


@pytest.mark.parametrize(
    ("salary_text", "default_currency", "expected"),
    [
        ("$50k - $80k", "USD", (50000, 80000, "USD")),
        ("45 000 - 65 000 kr/mån", "SEK", (45000, 65000, "SEK")),
        ("€60,000", "USD", (60000, 60000, "EUR")),
        ("Lön enligt överenskommelse", "SEK", (None, None, "SEK")),
        ("", "USD", (None, None, "USD")),
    ],
)
def test_domain_parse_salary_range_extracts_bounds_and_currency(
    salary_text: str,
    default_currency: str,
    expected: tuple[int | None, int | None, str],
) -> None:
    """Extract salary bounds and currency from common free-text forms.

    Args:
        salary_text: Raw salary text.
        default_currency: Currency used when no marker is present.
        expected: Expected parse result.

    Returns:
        None: Assertions validate salary parsing.

    Raises:
        AssertionError: Raised when parsing deviates.
    """

    assert domain_parse_salary_range(salary_text, default_currency=default_currency) == expected


def test_domain_map_employment_type_normalizes_aliases() -> None:
    """Map source labels and fall back to the default.

    Returns:
        None: Assertions validate label mapping.

    Raises:
        AssertionError: Raised when mapping deviates.
    """

    assert domain_map_employment_type("full_time") == "Full-time"
    assert domain_map_employment_type("Heltid") == "Full-time"
    assert domain_map_employment_type("freelance") == "Contract"
    assert domain_map_employment_type(None) == "Full-time"
    assert domain_map_employment_type("sabbatical", default="Other") == "Other"


def test_domain_extract_requirements_keeps_seed_tags_first_and_unique() -> None:
    """Keep source tags first and append keyword matches once.

    Returns:
        None: Assertions validate requirement ordering.

    Raises:
        AssertionError: Raised when ordering or uniqueness is violated.
    """

    requirements = domain_extract_requirements(
        "Senior Python engineer with Docker and python scripting",
        seed_tags=["backend", "Python", "backend"],
    )

    assert requirements == ["backend", "Python", "Docker"]


def test_domain_job_post_payload_uses_rfc3339_timestamps() -> None:
    """Serialize postings with `Z`-suffixed UTC timestamps and the wire id key.

    Returns:
        None: Assertions validate payload shape.

    Raises:
        AssertionError: Raised when payload shape deviates.
    """

    job = JobPost(
        job_id="remotive-1",
        title="Engineer",
        company="Acme",
        posted_date=datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc),
        requirements=["Python"],
    )

    payload = domain_job_post_to_payload(job)

    assert payload["id"] == "remotive-1"
    assert payload["posted_date"] == "2024-03-01T08:00:00Z"
    assert payload["expires_date"] is None
    assert payload["requirements"] == ["Python"]
    assert domain_format_timestamp(None) is None


def test_domain_sync_log_record_rejects_unknown_status() -> None:
    """Reject audit entries with a status outside the closed vocabulary.

    Returns:
        None: Assertions validate status validation.

    Raises:
        AssertionError: Raised when an invalid status is accepted.
    """

    now = datetime(2024, 3, 1, tzinfo=timezone.utc)
    with pytest.raises(ValueError, match="unsupported sync status"):
        SyncLogRecord(
            connector_name="remotive",
            started_at_utc=now,
            completed_at_utc=now,
            jobs_fetched=0,
            jobs_inserted=0,
            jobs_duplicates=0,
            status="started",
        )

"""Shared posting field parsing helpers.

This module centralizes normalization logic used by several connectors so
timestamp, salary, and tag contracts stay deterministic across sources.
"""

from __future__ import annotations

import calendar
import re
from datetime import datetime, timezone

_DOMAIN_SALARY_CURRENCY_MARKERS = (
    ("EUR", ("€", "EUR")),
    ("GBP", ("£", "GBP")),
    ("SEK", ("SEK", "kr")),
    ("USD", ("$", "USD")),
)

_DOMAIN_SALARY_BY_AGREEMENT_MARKERS = ("överenskommelse", "agreement", "enligt ök", "negotiable")

_DOMAIN_EMPLOYMENT_TYPE_ALIASES = {
    "full_time": "Full-time",
    "full-time": "Full-time",
    "full time": "Full-time",
    "permanent": "Full-time",
    "heltid": "Full-time",
    "part_time": "Part-time",
    "part-time": "Part-time",
    "part time": "Part-time",
    "deltid": "Part-time",
    "contract": "Contract",
    "freelance": "Contract",
    "temporary": "Contract",
    "vikariat": "Contract",
    "projekt": "Contract",
    "internship": "Internship",
}

DOMAIN_TECH_KEYWORDS = (
    "Java", "Python", "JavaScript", "TypeScript", "C++", "C#", ".NET", "PHP", "Ruby", "Go", "Rust", "Swift",
    "Kotlin", "React", "Angular", "Vue", "Node.js", "Spring", "Django", "Flask", "Express", "Laravel",
    "Docker", "Kubernetes", "AWS", "Azure", "GCP", "CI/CD", "Jenkins", "Git", "Linux",
    "SQL", "PostgreSQL", "MySQL", "MongoDB", "Redis", "Elasticsearch",
    "API", "REST", "GraphQL", "Microservices", "Agile", "Scrum",
)


def domain_utc_now() -> datetime:
    """Return the current timestamp as a timezone-aware UTC datetime."""

    return datetime.now(timezone.utc)


def domain_parse_timestamp(value: object | None) -> datetime | None:
    """Parse one source timestamp into a timezone-aware UTC datetime.

    Accepts RFC 3339 / ISO-8601 text (with or without `Z`), plain dates, and
    Unix epoch seconds. Naive values are interpreted as UTC.

    Args:
        value: Candidate timestamp value from a source payload.

    Returns:
        datetime | None: Parsed UTC timestamp, or None when unsupported.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(float(value), tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(value, str):
        return None

    normalized_value = value.strip()
    if not normalized_value:
        return None

    for candidate in _domain_build_timestamp_candidates(normalized_value):
        try:
            parsed_value = datetime.fromisoformat(candidate)
        except ValueError:
            continue
        return _domain_normalize_to_utc(parsed_value)

    for supported_format in ("%Y-%m-%d %H:%M:%S", "%Y/%m/%d"):
        try:
            return _domain_normalize_to_utc(datetime.strptime(normalized_value, supported_format))
        except ValueError:
            continue
    return None


def domain_parse_timestamp_or_now(value: object | None, fetched_at: datetime | None = None) -> datetime:
    """Parse a source timestamp and fall back to fetch time when unsupported.

    Args:
        value: Candidate timestamp value.
        fetched_at: Optional fetch timestamp used as fallback.

    Returns:
        datetime: Parsed timestamp or the fallback.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    parsed_value = domain_parse_timestamp(value)
    if parsed_value is not None:
        return parsed_value
    return fetched_at or domain_utc_now()


def domain_add_months(value: datetime, months: int) -> datetime:
    """Shift a timestamp by whole calendar months, clamping the day of month.

    Args:
        value: Base timestamp.
        months: Number of months to add.

    Returns:
        datetime: Shifted timestamp.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    month_index = value.month - 1 + months
    target_year = value.year + month_index // 12
    target_month = month_index % 12 + 1
    target_day = min(value.day, calendar.monthrange(target_year, target_month)[1])
    return value.replace(year=target_year, month=target_month, day=target_day)


def domain_parse_salary_range(salary_text: str, default_currency: str = "USD") -> tuple[int | None, int | None, str]:
    """Extract a numeric salary range and currency from free-text salary.

    Handles forms such as `$50k - $80k`, `45 000 - 65 000 kr/mån`,
    `45000 till 65000`, and single figures (used as both bounds).

    Args:
        salary_text: Raw salary text.
        default_currency: Currency used when no marker is detected.

    Returns:
        tuple[int | None, int | None, str]: Minimum, maximum, and currency code.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    normalized_text = (salary_text or "").strip()
    if not normalized_text:
        return None, None, default_currency

    currency = default_currency
    for currency_code, markers in _DOMAIN_SALARY_CURRENCY_MARKERS:
        if any(marker in normalized_text for marker in markers):
            currency = currency_code
            break

    lowered_text = normalized_text.lower()
    if any(marker in lowered_text for marker in _DOMAIN_SALARY_BY_AGREEMENT_MARKERS):
        return None, None, currency

    compact_text = re.sub(r"(?<=\d)[\s,](?=\d{3}\b)", "", lowered_text)
    amounts = [
        _domain_salary_amount(number_text, suffix)
        for number_text, suffix in re.findall(r"(\d+(?:\.\d+)?)\s*(k(?![a-zåäö]))?", compact_text)
    ]
    amounts = [amount for amount in amounts if amount > 0]
    if not amounts:
        return None, None, currency
    if len(amounts) == 1:
        return amounts[0], amounts[0], currency
    return min(amounts[0], amounts[1]), max(amounts[0], amounts[1]), currency


def domain_map_employment_type(value: str | None, default: str = "Full-time") -> str:
    """Map a source employment type label to the normalized vocabulary.

    Args:
        value: Source label such as `full_time` or `Heltid`.
        default: Label used for unknown values.

    Returns:
        str: Normalized employment type.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if not value:
        return default
    return _DOMAIN_EMPLOYMENT_TYPE_ALIASES.get(value.strip().lower(), default)


def domain_extract_requirements(text: str, seed_tags: list[str] | None = None) -> list[str]:
    """Build ordered requirement tags from seed tags and keyword matches.

    Args:
        text: Free text (title plus description) to scan.
        seed_tags: Source-provided tags kept first, in order.

    Returns:
        list[str]: Unique requirement tags in first-seen order.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    requirements: list[str] = []
    seen_tags: set[str] = set()
    for tag in seed_tags or []:
        if not isinstance(tag, str) or not tag.strip() or tag in seen_tags:
            continue
        seen_tags.add(tag)
        requirements.append(tag)

    lowered_text = (text or "").lower()
    for keyword in DOMAIN_TECH_KEYWORDS:
        if keyword in seen_tags:
            continue
        if keyword.lower() in lowered_text:
            seen_tags.add(keyword)
            requirements.append(keyword)
    return requirements


def _domain_salary_amount(number_text: str, suffix: str) -> int:
    """Convert one matched salary figure to an integer amount."""

    amount = float(number_text)
    if suffix == "k":
        amount *= 1000
    return int(amount)


def _domain_build_timestamp_candidates(normalized_value: str) -> list[str]:
    """Build ordered timestamp parse candidates.

    Args:
        normalized_value: Stripped source timestamp value.

    Returns:
        list[str]: Ordered de-duplicated candidate values.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    candidate_values: list[str] = [normalized_value]
    if normalized_value.endswith("Z"):
        candidate_values.append(f"{normalized_value[:-1]}+00:00")
    if " " in normalized_value and "T" not in normalized_value:
        candidate_values.append(normalized_value.replace(" ", "T", 1))

    seen_values: set[str] = set()
    unique_candidates: list[str] = []
    for candidate in candidate_values:
        if candidate in seen_values:
            continue
        seen_values.add(candidate)
        unique_candidates.append(candidate)
    return unique_candidates


def _domain_normalize_to_utc(value: datetime) -> datetime:
    """Normalize datetime value to timezone-aware UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


__all__ = [
    "DOMAIN_TECH_KEYWORDS",
    "domain_add_months",
    "domain_extract_requirements",
    "domain_map_employment_type",
    "domain_parse_salary_range",
    "domain_parse_timestamp",
    "domain_parse_timestamp_or_now",
    "domain_utc_now",
]

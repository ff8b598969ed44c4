"""
Options for an Elasticsearch import run.

The CLI hands over raw strings. parse_import_options turns
them into a validated ImportOptions, raising ConfigError on
anything malformed so a bad invocation fails before a single
row is read.
"""

from datetime import date, datetime, time, timedelta

from pydantic import BaseModel, Field

from audit_stash.exceptions import ConfigError


class ImportOptions(BaseModel):
    """What to import and how to label it."""
    date_from: datetime
    date_until: datetime
    models: list[str] = Field(default_factory=list)
    exclude_models: list[str] = Field(default_factory=list)
    type_map: dict[str, str] = Field(default_factory=dict)
    extra_meta: dict[str, str] = Field(default_factory=dict)


def parse_date(value: str, today: date | None = None) -> date:
    """
    Parse a date option.

    Accepts the keywords now, today and yesterday, ISO dates
    (2016-01-31) and ISO datetimes, whose time part is dropped.
    """
    today = today or date.today()
    text = (value or "").strip()

    if text.lower() in ("now", "today"):
        return today
    if text.lower() == "yesterday":
        return today - timedelta(days=1)

    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise ConfigError(f"Invalid date: '{value}'")


def parse_list(value: str | None) -> list[str]:
    """Split a comma separated option, dropping blanks."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_pairs(value: str | None, option: str) -> dict[str, str]:
    """
    Parse a comma separated list of key:value pairs.

    Only the first colon separates key from value, so values
    may contain colons themselves (app_url:http://example.com).
    """
    pairs = {}
    for item in parse_list(value):
        key, sep, val = item.partition(":")
        key = key.strip()
        if not sep or not key:
            raise ConfigError(
                f"Invalid {option} entry '{item}', expected key:value"
            )
        pairs[key] = val.strip()
    return pairs


def parse_import_options(
    date_from: str = "now",
    date_until: str = "now",
    models: str | None = None,
    exclude_models: str | None = None,
    type_map: str | None = None,
    extra_meta: str | None = None,
    today: date | None = None,
) -> ImportOptions:
    """Build ImportOptions from raw option strings."""
    start = datetime.combine(parse_date(date_from, today), time.min)
    # time.max keeps audits logged within the last second of the day
    end = datetime.combine(parse_date(date_until, today), time.max)

    if start > end:
        raise ConfigError(
            f"--from ({start.date()}) is after --until ({end.date()})"
        )

    return ImportOptions(
        date_from=start,
        date_until=end,
        models=parse_list(models),
        exclude_models=parse_list(exclude_models),
        type_map=parse_pairs(type_map, "type-map"),
        extra_meta=parse_pairs(extra_meta, "extra-meta"),
    )

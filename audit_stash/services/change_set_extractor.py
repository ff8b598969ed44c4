"""
Change set extractor: folds a group of delta rows into one audit.

Each delta row holds a single property's old and new value.
The extractor indexes the group by property name and builds
the original and changed maps the search documents carry.

Two fixes are applied to every value on the way:

- Many-to-many references. The legacy logger stored the ids
  of associated records as a comma separated string under a
  capitalized key (Tag: "3,4,5"). These are decoded back into
  lists of ints.
- Zero dates. MySQL lets 0000-00-00 through as a date; those
  values become None.
"""

from typing import Any, Callable

from audit_stash.schemas.records import DetailRow, LogicalAuditRecord

ZERO_DATE_PREFIX = "0000-00-00"

Decoder = Callable[[Any, str], Any]


def decode_reference_list(value: Any, key: str) -> Any:
    """
    Decode a legacy many-to-many reference into a list of ints.

    Values nested under their own key ({"Tag": "1,2"}) are
    unwrapped first. Lists pass through. A string whose parts
    are not all integers is not a reference list and is
    returned untouched.
    """
    if isinstance(value, dict) and key in value:
        value = value[key]

    if not isinstance(value, str):
        return value

    if not value.strip():
        return []

    parts = [part.strip() for part in value.split(",")]
    try:
        return [int(part) for part in parts]
    except ValueError:
        return value


def remove_zero_date(value: Any) -> Any:
    """Map MySQL's 0000-00-00 sentinel dates to None."""
    if isinstance(value, str) and value.startswith(ZERO_DATE_PREFIX):
        return None
    return value


class ChangeSetExtractor:
    """
    Builds LogicalAuditRecord objects from row groups.

    decoders maps explicit field names to decoder functions.
    Fields without an entry fall back to the capitalized-name
    convention unless infer_references is turned off.
    """

    def __init__(
        self,
        decoders: dict[str, Decoder] | None = None,
        infer_references: bool = True,
    ):
        self.decoders = dict(decoders or {})
        self.infer_references = infer_references

    def _decoder_for(self, key: str) -> Decoder | None:
        if key in self.decoders:
            return self.decoders[key]
        if self.infer_references and key and key[0].isupper():
            return decode_reference_list
        return None

    def normalize(self, value: Any, key: str) -> Any:
        """Apply the reference decoder, then the zero date remover."""
        decoder = self._decoder_for(key)
        if decoder is not None:
            value = decoder(value, key)
        return remove_zero_date(value)

    def extract(self, group: list[DetailRow]) -> LogicalAuditRecord:
        """Fold a non-empty group of rows into a single record."""
        if not group:
            raise ValueError("Cannot extract changes from an empty group")

        # Last row wins when a property repeats within a group
        changes = {row.property_name: row for row in group}

        return LogicalAuditRecord(
            audit=group[0].audit,
            original={
                key: self.normalize(row.old_value, key)
                for key, row in changes.items()
            },
            changed={
                key: self.normalize(row.new_value, key)
                for key, row in changes.items()
            },
        )

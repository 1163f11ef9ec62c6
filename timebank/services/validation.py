from typing import Mapping, Optional, Union

from pydantic import ValidationError

from timebank.core.errors import FieldValidationError, field_errors
from timebank.schemas.entry import EntryCreate, EntryUpdate


class EntryValidationError(FieldValidationError):
    pass


def validate_entry(
    data: Mapping,
    contributor_id: Optional[str] = None,
    partial: bool = False,
) -> Union[EntryCreate, EntryUpdate]:
    """
    Validate a candidate entry without touching storage.

    Returns the normalized entry (tags cleaned, week_start snapped to Monday).
    ``contributor_id`` is the caller's identity, used when the payload names none.
    Raises EntryValidationError carrying [{field, message}] on any rule violation.
    """
    schema = EntryUpdate if partial else EntryCreate
    try:
        entry = schema.model_validate(dict(data))
    except ValidationError as exc:
        raise EntryValidationError(field_errors(exc.errors()))
    if entry.contributor_id is None and contributor_id is not None:
        entry.contributor_id = contributor_id
    return entry

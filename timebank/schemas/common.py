import uuid
from typing import Annotated
from pydantic import AfterValidator


def _canonical_uuid(value: str) -> str:
    try:
        return str(uuid.UUID(value))
    except (ValueError, AttributeError, TypeError):
        raise ValueError("Invalid identifier (UUID required)")


# UUID carried as its canonical string form
Identifier = Annotated[str, AfterValidator(_canonical_uuid)]

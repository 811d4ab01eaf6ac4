"""Field types shared by request schemas and path parameters."""

import re
from typing import Annotated

from pydantic import AfterValidator
from ulid import ULID

_ULID_RE = re.compile(r"^[0-7][0-9A-HJKMNP-TV-Z]{25}$", re.IGNORECASE)


def _check_ulid(value: str) -> str:
    if not _ULID_RE.match(value):
        raise ValueError("Invalid id, expected a 26-character ULID")
    return str(ULID.from_str(value.upper()))


# Malformed ids are rejected with 422 before they reach the database
UlidStr = Annotated[str, AfterValidator(_check_ulid)]

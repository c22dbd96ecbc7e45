import re
import unicodedata
from itertools import dropwhile

from alsader.core.modules.reference.models import DocumentType, ReferenceId
from alsader.errors import InvalidFormatError

# \d is Unicode-aware, so Arabic-Indic digits (٠-٩) are accepted as well
REFERENCE_ID_RE = re.compile(r"^\d+$")

# Stored as a BSON int64
MAX_REFERENCE_ID = 2**63 - 1
MAX_REFERENCE_DIGITS = len(str(MAX_REFERENCE_ID))


def parse_reference_id(raw: str) -> ReferenceId:
    """Parse a user-supplied reference id into its canonical integer form.

    Leading zeros are dropped, so "007" and "7" name the same reference.

    Raises:
        InvalidFormatError: If the value is not a positive decimal integer that fits in 64 bits
    """
    value = raw.strip()
    if not REFERENCE_ID_RE.fullmatch(value):
        raise InvalidFormatError(f"Invalid reference id '{raw[:40]}': must contain digits only")

    # Length is checked before int() so huge inputs never reach the integer parser
    significant = "".join(dropwhile(lambda char: unicodedata.decimal(char) == 0, value))
    if len(significant) > MAX_REFERENCE_DIGITS:
        raise InvalidFormatError(f"Invalid reference id '{raw[:40]}': number is too large")

    number = int(significant) if significant else 0
    if number < 1:
        raise InvalidFormatError(f"Invalid reference id '{raw}': must be a positive number")
    if number > MAX_REFERENCE_ID:
        raise InvalidFormatError(f"Invalid reference id '{raw}': number is too large")
    return ReferenceId(number)


def is_reference_id(raw: str) -> bool:
    try:
        parse_reference_id(raw)
    except InvalidFormatError:
        return False
    return True


def format_reference(document_type: DocumentType, reference_id: int, width: int = 3) -> str:
    """Format a reference for display: format_reference(INBOUND, 7) -> "IN-007"."""
    return f"{document_type.prefix}-{reference_id:0{width}d}"

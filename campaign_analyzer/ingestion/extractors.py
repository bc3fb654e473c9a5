"""Regex extraction of identifiers embedded in campaign and line item names.

Each extractor returns the matched group, or None when the name does not
carry the identifier.
"""

import re
from typing import Any

# "..._CID12345_..." / "...-id:4567" -> "12345" / "4567"
CAMPAIGN_ID_PATTERN = re.compile(r"(?:^|[_\-\s])(?:cid|id)[_\-:]?(\d{3,})", re.IGNORECASE)

# Bare numeric id of 6+ digits, e.g. "Brand_2024_1234567_Search"
BARE_ID_PATTERN = re.compile(r"(?<![\dA-Za-z])(\d{6,})(?![\dA-Za-z])")

# "AMP_123", "amp-123", "AMP123" -> "123"
AMP_ID_PATTERN = re.compile(r"amp[_\-\s:]?(\d+)", re.IGNORECASE)

# "AUD_Auto Intenders_..." / "audience:Sports" -> "Auto Intenders" / "Sports"
AUDIENCE_NAME_PATTERN = re.compile(
    r"(?:aud|audience)[_\-:]+([A-Za-z0-9]+(?:[ ][A-Za-z0-9]+)*)", re.IGNORECASE
)


def extract_campaign_id(name: Any) -> str | None:
    """Campaign id from an explicit CID/ID marker, else a bare 6+ digit run."""
    if not isinstance(name, str):
        return None
    match = CAMPAIGN_ID_PATTERN.search(name)
    if match:
        return match.group(1)
    match = BARE_ID_PATTERN.search(name)
    return match.group(1) if match else None


def extract_amp_id(name: Any) -> str | None:
    if not isinstance(name, str):
        return None
    match = AMP_ID_PATTERN.search(name)
    return match.group(1) if match else None


def extract_audience_name(name: Any) -> str | None:
    if not isinstance(name, str):
        return None
    match = AUDIENCE_NAME_PATTERN.search(name)
    return match.group(1) if match else None

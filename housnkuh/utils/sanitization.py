import re
from typing import Optional

import bleach

# Control characters except tab, newline and carriage return
CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """
    Strip all HTML from user-supplied text before it is stored.

    Vendor names, addresses and cancellation reasons end up in admin views
    and MJML emails, so markup is removed rather than escaped.
    Returns None if input is None.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    cleaned = bleach.clean(value, tags=[], attributes={}, strip=True)
    return CONTROL_CHARS.sub("", cleaned).strip()

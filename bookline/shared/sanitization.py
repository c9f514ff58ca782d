"""Escaping of user-supplied text before it is placed into email markup"""

import html
from typing import Optional


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """
    Escape HTML special characters to prevent markup injection.
    Returns None if input is None.
    """
    if value is None:
        return None
    return html.escape(str(value), quote=True)

"""
HTML Escaping for Telegram HTML Mode

Customer-supplied order fields (names, addresses, delivery instructions) end
up in admin notifications sent with HTML parse mode. Escape them before
embedding; never escape static text or pre-formatted HTML.
"""

import html
from typing import Any


def safe_html(text: Any) -> str:
    """
    Escapes HTML special characters in user-provided text.

    Examples:
        >>> safe_html("Jane</b><script>alert(1)</script>")
        'Jane&lt;/b&gt;&lt;script&gt;alert(1)&lt;/script&gt;'

        >>> safe_html(None)
        ''
    """
    if text is None:
        return ""
    return html.escape(str(text), quote=True)

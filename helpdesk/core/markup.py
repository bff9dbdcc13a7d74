import re

import markdown
import nh3

LINE_BREAK_PATTERN = re.compile(r"(\r\n|\n\r|\r|\n)")


def render_text(raw: str | None) -> str:
    """Render user-entered text (issue bodies, comments) to sanitized HTML.

    Line breaks are kept as ``<br>`` before the markdown pass so that
    single newlines survive rendering.
    """
    if not raw:
        return ""
    with_breaks = LINE_BREAK_PATTERN.sub("<br>", raw)
    return nh3.clean(markdown.markdown(with_breaks))

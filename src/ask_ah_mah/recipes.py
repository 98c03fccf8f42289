"""Helpers for recipes saved out of chat replies."""

import re
from typing import List, Optional, Tuple

_HEADING = re.compile(r"^##[ \t]+(.+?)[ \t]*#*[ \t]*$", re.MULTILINE)
_RULE = re.compile(r"^[ \t]*(?:-{3,}|\*{3,}|_{3,})[ \t]*$", re.MULTILINE)


def extract_recipe_block(text: str) -> Optional[Tuple[str, str]]:
    """
    Find the recipe embedded in an assistant reply.

    Replies format a recipe as a markdown block opened by "## Recipe Name".
    The block runs until the next "##" heading or a horizontal rule.

    Returns:
        (name, block) or None when the text has no "##" heading.

    Examples:
        "Wah!\\n## Egg Fried Rice\\n**Ingredients:**..." -> ("Egg Fried Rice", "## Egg Fried Rice\\n**Ingredients:**...")
    """
    match = _HEADING.search(text or "")
    if not match:
        return None

    name = match.group(1).strip().strip("*").strip()
    rest = text[match.end():]
    ends = [m.start() for m in (_HEADING.search(rest), _RULE.search(rest)) if m]
    body = rest[: min(ends)] if ends else rest
    return name, (match.group(0) + body).strip()


def normalize_tags(tags: Optional[List[str]]) -> List[str]:
    """Strip, lower-case and de-duplicate tags, keeping first-seen order."""
    seen: List[str] = []
    for tag in tags or []:
        t = " ".join(str(tag).lower().split())
        if t and t not in seen:
            seen.append(t)
    return seen

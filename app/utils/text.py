import re


def slugify(text: str) -> str:
    """'Pizza's & Pasta' -> 'pizza-s-pasta'"""
    return re.sub(r"[^a-z0-9]+", "-", (text or "").lower()).strip("-")

"""
Query helpers shared by the resource routers.
"""


def escape_like(term: str) -> str:
    """Escape SQL LIKE metacharacters so user input only matches literally.

    Use with ``escape="\\\\"`` on the ``like``/``ilike`` call.
    """
    return term.replace("\\", "\\\\").replace("%", r"\%").replace("_", r"\_")

"""Shared utility functions for service layer."""


def escape_ilike(value: str) -> str:
    r"""
    Escape LIKE/ILIKE wildcards so user search text matches literally.

    `%`, `_` and the escape character `\` itself are prefixed with `\`; the
    pattern must be used with `escape="\\"` (SQLite has no default escape).
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")

from __future__ import annotations

_PUNCT_TABLE = str.maketrans(
    {
        "\r": "\n",
        "，": ",",  # full-width comma
        "、": ",",  # ideographic enumeration comma
        "：": ":",  # full-width colon
        "\u00a0": " ",
    }
)


def normalize_text(text: str | None) -> str:
    """Canonicalize raw narrative text for keyword and label matching."""
    if not text:
        return ""
    return str(text).replace("\r\n", "\n").translate(_PUNCT_TABLE).lower()

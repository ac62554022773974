"""Register service providers in a theme's ``config/app.php``.

The config file is PHP, but it is never parsed as such. The named array is
located by pattern and new entries are attached after its last ``::class``
entry, so every byte outside that insertion point is left as it was.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Sequence

from lumberjack_installer.core.config import PROVIDERS_KEY
from lumberjack_installer.core.errors import ConfigBlockNotFoundError

__all__ = [
    "DEFAULT_INDENT",
    "find_block",
    "inject_into_text",
    "inject_service_providers",
]

logger = logging.getLogger(__name__)

DEFAULT_INDENT = "\t\t"
CLASS_REF_PATTERN = re.compile(r"[\w\\]+::class")


def _block_pattern(key: str) -> re.Pattern[str]:
    return re.compile(
        r"(?P<quote>['\"])" + re.escape(key) + r"(?P=quote)\s*=>\s*\[(?P<body>.*?)\]",
        re.DOTALL,
    )


def find_block(text: str, key: str = PROVIDERS_KEY) -> tuple[int, int]:
    """Return the ``(start, end)`` offsets of the array body for *key*."""
    match = _block_pattern(key).search(text)
    if match is None:
        raise ConfigBlockNotFoundError(f"Could not find a '{key}' array in the config file")
    return match.start("body"), match.end("body")


def _indent_for(text: str, position: int) -> str:
    line_start = text.rfind("\n", 0, position) + 1
    prefix = text[line_start:position]
    if prefix and not prefix.strip():
        return prefix
    return DEFAULT_INDENT


def inject_into_text(text: str, providers: Sequence[str], key: str = PROVIDERS_KEY) -> str:
    """Return *text* with *providers* appended to the *key* array.

    Raises:
        ConfigBlockNotFoundError: the array is missing or has no ``::class`` entry
            to anchor the insertion on.
    """
    if not providers:
        return text

    body_start, body_end = find_block(text, key)
    anchors = list(CLASS_REF_PATTERN.finditer(text, body_start, body_end))
    if not anchors:
        raise ConfigBlockNotFoundError(
            f"The '{key}' array has no existing entries to insert after"
        )

    anchor = anchors[-1]
    indent = _indent_for(text, anchor.start())
    replacement = anchor.group(0) + ",\n" + indent + f",\n{indent}".join(providers)
    return text[: anchor.start()] + replacement + text[anchor.end():]


def inject_service_providers(
    config_path: Path,
    providers: Sequence[str],
    *,
    key: str = PROVIDERS_KEY,
) -> bool:
    """Append *providers* to the *key* array of *config_path*.

    Returns ``False`` when there is nothing to add and the file is untouched.
    """
    if not providers:
        return False

    if not config_path.is_file():
        raise ConfigBlockNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8", newline="") as f:
            original = f.read()
    except UnicodeDecodeError as e:
        raise ConfigBlockNotFoundError(
            f"Config file is not valid UTF-8: {config_path}", detail=str(e)
        ) from e
    updated = inject_into_text(original, providers, key)
    with open(config_path, "w", encoding="utf-8", newline="") as f:
        f.write(updated)

    logger.debug("Registered %d provider(s) in %s", len(providers), config_path)
    return True

"""Wiki-link extraction from note text."""

import re

# [[target]], [[target#section]], [[target|display]], [[target#section|display]]
# The interior is a maximal run of non-whitespace characters.
WIKILINK_PATTERN = re.compile(r"\[\[(\S*)\]\]")

# Characters that end the resolvable part of a link target
TARGET_TERMINATORS = ("#", "|")


def strip_decorations(capture: str) -> str:
    """Cut a captured link interior at the first '#' or '|'.

    >>> strip_decorations("note#heading|Title")
    'note'
    """
    cut = len(capture)
    for terminator in TARGET_TERMINATORS:
        idx = capture.find(terminator)
        if idx != -1 and idx < cut:
            cut = idx
    return capture[:cut]


def extract_links(content: str) -> list[str]:
    """Extract wiki-link targets from note content.

    Targets are returned in order of appearance with duplicates preserved.
    Mentions that are empty once decorations are removed (``[[#heading]]``)
    point into the current note and are skipped.
    """
    result = []
    for line in content.splitlines():
        for match in WIKILINK_PATTERN.finditer(line):
            target = strip_decorations(match.group(1))
            if target:
                result.append(target)
    return result


def normalize_identifier(name: str) -> str:
    """Normalize a note name or link target to its lookup key."""
    return name.strip().casefold()

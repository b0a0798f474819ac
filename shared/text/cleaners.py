"""Sanitisers for roadmap node titles and node-derived search queries.

Both exist because roadmap titles produced upstream sometimes carry metadata
residue (e.g. "Docker Basics roadmap5,h5,h" or "Git 2 2 Branching"). They are
workarounds for that residue, not a description of valid input, so they only
remove the known artefact shapes.
"""

import re

_INITIAL_NUMBERING = re.compile(r"^\d+\.\s+")
_FIRST_DIGIT = re.compile(r"\d")
_ROADMAP_SUFFIX = re.compile(r"\s*roadmap\d+(?:,h\d*)*\s*$", re.IGNORECASE)
_REPEATED_UPPER = re.compile(r"([A-Z])\1{2,}")
_STRAY_NUMBER = re.compile(r"(?<!\S)\d+(?!\S)")
_WHITESPACE = re.compile(r"\s+")


def clean_node_title(title: str) -> str:
    """Strip metadata residue from a roadmap node title.

    Everything from the first digit onwards is removed. A leading list
    number such as "1. " or "10. " is preserved and the search for the
    first digit starts after it.

    Examples:
        "Docker Basics3h"      -> "Docker Basics"
        "2. Networking 12,h4"  -> "2. Networking"
        "Kubernetes"           -> "Kubernetes"
    """
    if not title:
        return title

    numbering = _INITIAL_NUMBERING.match(title)
    if numbering:
        rest = title[numbering.end():]
        digit = _FIRST_DIGIT.search(rest)
        if digit:
            return (numbering.group(0) + rest[:digit.start()]).strip()
        return title

    digit = _FIRST_DIGIT.search(title)
    if digit:
        return title[:digit.start()].strip()
    return title


def _drop_adjacent_duplicates(words: list[str]) -> list[str]:
    kept: list[str] = []
    for word in words:
        if kept and kept[-1].lower() == word.lower():
            continue
        kept.append(word)
    return kept


def clean_node_query(text: str) -> str:
    """Sanitise a roadmap node label before it is used as a search query.

    Steps, in order:
      1. drop a trailing "roadmap<digits>(,h<digits>)*" suffix
      2. collapse runs of 3+ identical uppercase letters to one
      3. drop digit runs that stand alone between whitespace
      4. drop a word when it repeats the word right before it (case-insensitive);
         non-adjacent repeats are kept

    Args:
        text (str): The raw node label.

    Returns:
        str: The cleaned label with single spaces.
    """
    if not text:
        return ""
    cleaned = _ROADMAP_SUFFIX.sub("", text)
    cleaned = _REPEATED_UPPER.sub(r"\1", cleaned)
    cleaned = _STRAY_NUMBER.sub(" ", cleaned)
    words = _WHITESPACE.sub(" ", cleaned).strip().split(" ")
    return " ".join(_drop_adjacent_duplicates([w for w in words if w]))

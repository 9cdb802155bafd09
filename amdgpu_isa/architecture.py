"""
Architecture Name Normalization

Maps free-text architecture labels found in the vendor XML documents
("AMD RDNA 3.5", "CDNA3 Instruction Set Architecture") and the short hints
supplied by the editor ("rdna35", "cdna4") to one canonical vocabulary of
architecture tags: a family ("rdna" / "cdna") plus an optional version
("rdna3", "rdna3.5", "cdna4").

Usage:
    from amdgpu_isa.architecture import normalize_architecture_name

    normalize_architecture_name("AMD RDNA 3.5")   # -> "rdna3.5"
    normalize_architecture_hint("rdna35")         # -> "rdna3.5"
"""

import re
from typing import Iterable, Optional


# ============================================================================
# Configuration
# ============================================================================

FAMILIES = ("rdna", "cdna")

# Editor language identifiers and the filter each one implies
LANGUAGE_ARCHITECTURES = {
    "rdna35": "rdna3.5",
    "rdna3": "rdna3",
    "rdna4": "rdna4",
    "cdna3": "cdna3",
    "cdna4": "cdna4",
    "rdna": "rdna",
    "cdna": "cdna",
}


# ============================================================================
# Normalizers
# ============================================================================

def normalize_architecture_name(raw: str) -> str:
    """
    Normalize an architecture label taken from a source document.

    The first whitespace-separated token mentioning a family keyword fixes the
    family. Text glued after the keyword ("rdna3.5") is the version; otherwise
    the next token carrying a digit is used.

    Examples:
        "RDNA 3.5"                  -> "rdna3.5"
        "AMD Instinct CDNA3"        -> "cdna3"
        "RDNA"                      -> "rdna"
        "Some Other Arch"           -> "someotherarch"
    """
    lower = raw.strip().lower()
    family: Optional[str] = None
    version: Optional[str] = None

    for token in lower.split():
        if family is None:
            for keyword in FAMILIES:
                if keyword in token:
                    family = keyword
                    remainder = token.split(keyword, 1)[1]
                    if any(ch.isdigit() for ch in remainder):
                        version = remainder
                    break
            continue

        if version is None and any(ch.isdigit() for ch in token):
            version = token
            break

    if family is None:
        return re.sub(r'\s+', '', lower)
    if version is None:
        return family
    return f"{family}{version}"


def normalize_architecture_hint(raw: str) -> str:
    """
    Normalize an architecture hint coming from the editor side.

    Editor language ids cannot contain dots, so "rdna35" stands for RDNA 3.5.
    A two-digit suffix glued to "rdna" is split into major.minor.
    """
    cleaned = re.sub(r'\s+', '', raw.strip().lower())
    match = re.fullmatch(r'rdna(\d)(\d)', cleaned)
    if match:
        return f"rdna{match.group(1)}.{match.group(2)}"
    return cleaned


def architecture_filter(language_id: str, override: Optional[str] = None) -> Optional[str]:
    """
    Reconcile the editor language id with an explicit architecture override.

    A non-blank override always wins. Unknown language ids mean "no filter".
    """
    if override is not None and override.strip():
        return normalize_architecture_hint(override)
    return LANGUAGE_ARCHITECTURES.get(language_id)


def architecture_matches(architectures: Iterable[str], arch_filter: str) -> bool:
    """
    Check whether a record's architecture tags satisfy a filter.

    Family-only filters ("rdna", "cdna") match any version of the family;
    versioned filters require an exact tag.
    """
    if arch_filter in FAMILIES:
        return any(arch.startswith(arch_filter) for arch in architectures)
    return any(arch == arch_filter for arch in architectures)

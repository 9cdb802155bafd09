"""
Special Register Normalization and Range Compression

The ISA documents list every predefined operand value, which includes large
mechanically-named register files (attr0..attr63, param0..param31,
ttmp0..ttmp15, ...). This module filters and deduplicates those names across
documents and compresses the regular families into range descriptors:

    {"prefix": "ttmp", "start": 0, "count": 16,
     "description": "Trap temporary register.",
     "overrides": [{"index": 3, "description": "..."}]}

Families that are not known hardware register files, or that are not a
contiguous run of at least three indices, stay as individual entries.
"""

import re
from collections import Counter
from typing import Dict, List, Optional, Tuple

from .knowledge_base import CompressedRegisters, SpecialRegister, SpecialRegisterRange


# ============================================================================
# Configuration
# ============================================================================

# Prefixes that form real register files and may be compressed into ranges
COMPRESSIBLE_PREFIXES = {"attr", "param", "mrt", "pos", "ttmp"}

# A family needs at least this many contiguous members to become a range
MIN_RANGE_COUNT = 3

# Canonical descriptions that replace whatever the documents say
WELL_KNOWN_REGISTERS = {
    "exec": "Wavefront execution mask (64-bit). Each bit enables a lane.",
    "exec_lo": "Lower 32 bits of EXEC (lane execution mask).",
    "exec_hi": "Upper 32 bits of EXEC (lane execution mask).",
    "scc": "Scalar condition code (single-bit compare result).",
    "src_scc": "Scalar condition code (single-bit compare result).",
    "vcc": "Vector condition code register (64-bit). Per-lane compare results.",
    "vcc_lo": "Lower 32 bits of VCC (vector condition codes).",
    "vcc_hi": "Upper 32 bits of VCC (vector condition codes).",
    "pc": "Program counter (64-bit).",
    "flat_scratch": "Flat scratch base/size pair (64-bit).",
    "flat_scratch_lo": "Lower 32 bits of FLAT_SCRATCH (base/size).",
    "flat_scratch_hi": "Upper 32 bits of FLAT_SCRATCH (base/size).",
}

SEE_ABOVE_HTML = "<p>See above.</p>"


# ============================================================================
# Filtering and Normalization
# ============================================================================

def is_see_above(description: str) -> bool:
    """Check for the "see above" placeholder used by the documents."""
    stripped = description.strip()
    return stripped == SEE_ABOVE_HTML or stripped.lower() == "see above"


def is_usable_description(description: Optional[str]) -> bool:
    """Non-empty and not a placeholder."""
    return bool(description and description.strip()) and not is_see_above(description)


def is_numeric_literal(name: str) -> bool:
    try:
        float(name)
    except ValueError:
        return False
    return True


def is_plain_vector_or_scalar_register(name: str) -> bool:
    """v0, v12, s3, ... are general purpose registers, not special ones."""
    return re.fullmatch(r'[vs][0-9]+', name) is not None


def is_ignored_special_register(name: str) -> bool:
    return is_plain_vector_or_scalar_register(name) or is_numeric_literal(name)


def normalize_special_register(register: SpecialRegister) -> SpecialRegister:
    """Clear placeholder descriptions and apply canonical well-known ones."""
    description = register.description
    if description is not None and is_see_above(description):
        description = None

    canonical = WELL_KNOWN_REGISTERS.get(register.name.lower())
    if canonical is not None:
        description = canonical

    return SpecialRegister(register.name, description)


class RegisterCollector:
    """
    Accumulates special registers from all documents.

    Names are compared case-insensitively; the first spelling seen is kept and
    the longest description wins (ties keep the stored one).
    """

    def __init__(self):
        self._by_name: Dict[str, SpecialRegister] = {}
        self.ignored_count = 0

    def add(self, register: SpecialRegister) -> None:
        key = register.name.lower()
        if is_ignored_special_register(key):
            self.ignored_count += 1
            return

        register = normalize_special_register(register)
        existing = self._by_name.get(key)
        if existing is None:
            self._by_name[key] = register
            return

        if register.description is None:
            return
        if existing.description is None or len(register.description) > len(existing.description):
            existing.description = register.description

    def extend(self, registers: List[SpecialRegister]) -> None:
        for register in registers:
            self.add(register)

    def registers(self) -> List[SpecialRegister]:
        """All collected registers sorted by name."""
        return sorted(self._by_name.values(), key=lambda reg: reg.name)

    def __len__(self) -> int:
        return len(self._by_name)


# ============================================================================
# Range Compression
# ============================================================================

def split_numeric_suffix(name: str) -> Optional[Tuple[str, int]]:
    """
    Split a register name into a non-numeric prefix and a numeric index.

    Examples:
        ttmp12   -> ("ttmp", 12)
        attr0    -> ("attr", 0)
        exec_lo  -> None   (no digits)
        mrtz0_x  -> None   (digits are not a clean suffix)
        42       -> None   (empty prefix)
    """
    match = re.fullmatch(r'([^0-9]+)([0-9]+)', name)
    if not match:
        return None
    return (match.group(1), int(match.group(2)))


def majority_description(registers: List[SpecialRegister]) -> Optional[str]:
    """
    Most frequent usable description of a family.

    Ties go to the description that sorts first.
    """
    tally = Counter(reg.description for reg in registers if is_usable_description(reg.description))
    if not tally:
        return None
    description, _count = max(sorted(tally.items()), key=lambda item: item[1])
    return description


def backfill_family(registers: List[SpecialRegister]) -> List[SpecialRegister]:
    """Give members with empty or placeholder descriptions the family's first usable one."""
    fallback = next(
        (reg.description for reg in registers if is_usable_description(reg.description)),
        None,
    )
    result = []
    for reg in registers:
        if is_usable_description(reg.description):
            result.append(reg)
        else:
            result.append(SpecialRegister(reg.name, fallback))
    return result


def is_contiguous(indices: List[int]) -> bool:
    """Sorted indices form start, start+1, ... with no gaps or repeats."""
    start = indices[0]
    return all(index == start + offset for offset, index in enumerate(indices))


def build_range(prefix: str, members: List[Tuple[int, SpecialRegister]]) -> SpecialRegisterRange:
    """Build a range from sorted, contiguous (index, register) members."""
    description = majority_description([reg for _index, reg in members])

    overrides: Dict[int, Optional[str]] = {}
    for index, reg in members:
        if is_usable_description(reg.description) and reg.description != description:
            overrides[index] = reg.description

    return SpecialRegisterRange(
        prefix=prefix,
        start=members[0][0],
        count=len(members),
        description=description,
        overrides=overrides,
    )


def compress_special_registers(registers: List[SpecialRegister]) -> CompressedRegisters:
    """
    Compress register families into ranges.

    Args:
        registers: Filtered, normalized and deduplicated registers

    Returns:
        CompressedRegisters with singles sorted by name and ranges by prefix.
        Singles without a usable description are dropped.
    """
    groups: Dict[str, List[Tuple[int, SpecialRegister]]] = {}
    singles: List[SpecialRegister] = []

    for reg in registers:
        split = split_numeric_suffix(reg.name)
        if split is None:
            singles.append(reg)
        else:
            prefix, index = split
            groups.setdefault(prefix, []).append((index, reg))

    ranges: List[SpecialRegisterRange] = []

    for prefix, members in groups.items():
        if prefix not in COMPRESSIBLE_PREFIXES:
            singles.extend(backfill_family([reg for _index, reg in members]))
            continue

        members.sort(key=lambda member: member[0])
        indices = [index for index, _reg in members]
        if len(members) < MIN_RANGE_COUNT or not is_contiguous(indices):
            singles.extend(reg for _index, reg in members)
            continue

        ranges.append(build_range(prefix, members))

    singles = [reg for reg in singles if is_usable_description(reg.description)]
    singles.sort(key=lambda reg: reg.name)
    ranges.sort(key=lambda rng: rng.prefix)

    return CompressedRegisters(singles, ranges)

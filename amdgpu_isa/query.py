"""
ISA Query Engine

Loads the compiled knowledge base once and answers point queries:

    engine = QueryEngine.load()                      # $AMDGPU_LSP_DATA or data/isa.json
    result = engine.resolve("v_add_f32_e32", "rdna3")
    if result.found:
        print(result.record.args, result.variant)

The engine holds no mutable state after construction; every query is a pure
lookup, so one engine may serve concurrent callers. Session state (document
text, architecture override) stays with the caller and is passed in per call.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional, Union

from .architecture import architecture_matches
from .encoding import EncodingVariant, split_encoding_variant
from .knowledge_base import InstructionRecord, KnowledgeBase, LoadInfo, SpecialRegister, load_knowledge_base


logger = logging.getLogger(__name__)

MIN_COMPLETION_PREFIX = 2


class QueryStatus(Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    FILTERED_OUT = "filtered_out"


class QueryResult(NamedTuple):
    status: QueryStatus
    base: str
    variant: EncodingVariant
    record: Optional[InstructionRecord] = None

    @property
    def found(self) -> bool:
        return self.status is QueryStatus.FOUND


class QueryEngine:
    """
    Name-indexed, read-only view of a knowledge base.

    Attributes:
        index: Lowercase instruction name -> records in knowledge-base order
        special_registers: Expanded register list sorted by name
        load_info: Source path and load error, if loading failed
    """

    def __init__(self, knowledge_base: KnowledgeBase, load_info: Optional[LoadInfo] = None):
        self.load_info = load_info or LoadInfo("<memory>")
        self.index: Dict[str, List[InstructionRecord]] = {}
        for record in knowledge_base.instructions:
            self.index.setdefault(record.name.lower(), []).append(record)

        # Ranges are expanded here once; queries never see the compressed form
        self.special_registers: List[SpecialRegister] = knowledge_base.expanded_registers()
        self._registers_by_name: Dict[str, SpecialRegister] = {}
        for register in self.special_registers:
            self._registers_by_name.setdefault(register.name.lower(), register)

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "QueryEngine":
        """Load from disk; failures leave an empty engine with load_info.load_error set."""
        knowledge_base, load_info = load_knowledge_base(path)
        return cls(knowledge_base, load_info)

    @property
    def record_count(self) -> int:
        return sum(len(records) for records in self.index.values())

    def status_message(self) -> str:
        """One-line load summary for the dispatcher's diagnostics."""
        if self.load_info.load_error:
            return f"{self.load_info.load_error} (path: {self.load_info.data_path})"
        return (
            f"Loaded {self.record_count} ISA entries ({len(self.index)} unique names) "
            f"from {self.load_info.data_path}"
        )

    # =========================================================================
    # Instruction Lookup
    # =========================================================================

    def resolve(self, token: str, architecture: Optional[str] = None) -> QueryResult:
        """
        Resolve a raw token to one instruction record.

        Args:
            token: Mnemonic as typed, possibly with an encoding suffix
            architecture: Canonical architecture filter, or None for no filter

        Returns:
            QueryResult with status FOUND, NOT_FOUND (no such name) or
            FILTERED_OUT (name exists, no record for the architecture)
        """
        base, variant = split_encoding_variant(token)
        records = self.index.get(base.lower())
        if not records:
            logger.debug("no entry for %s (base: %s)", token, base)
            return QueryResult(QueryStatus.NOT_FOUND, base, variant)

        if architecture is None:
            return QueryResult(QueryStatus.FOUND, base, variant, records[0])

        for record in records:
            if architecture_matches(record.architectures, architecture):
                return QueryResult(QueryStatus.FOUND, base, variant, record)

        logger.debug("entry %s filtered out by architecture %s", token, architecture)
        return QueryResult(QueryStatus.FILTERED_OUT, base, variant)

    def records_for(self, name: str) -> List[InstructionRecord]:
        """Every record sharing a (suffix-free) name, in knowledge-base order."""
        return list(self.index.get(name.lower(), []))

    def complete(self, prefix: str, architecture: Optional[str] = None) -> List[str]:
        """
        Instruction names starting with `prefix` (case-insensitive).

        Prefixes shorter than two characters produce no candidates. With an
        architecture filter only names that have a matching record are listed.
        """
        prefix = prefix.strip().lower()
        if len(prefix) < MIN_COMPLETION_PREFIX:
            return []

        labels = set()
        for name, records in self.index.items():
            if not name.startswith(prefix):
                continue
            if architecture is not None and not any(
                architecture_matches(record.architectures, architecture) for record in records
            ):
                continue
            labels.add(records[0].name.lower())
        return sorted(labels)

    # =========================================================================
    # Register Lookup
    # =========================================================================

    def lookup_register(self, name: str) -> Optional[SpecialRegister]:
        """Case-insensitive special register lookup."""
        return self._registers_by_name.get(name.lower())

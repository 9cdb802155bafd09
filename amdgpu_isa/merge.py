"""
Instruction Merger

Folds the instruction records of every source document into one table. The
same logical instruction (same name, description and argument shape) seen in
several architecture documents becomes a single record whose architecture set
is the union of all of them.
"""

from typing import Dict, List, Tuple

from .architecture import normalize_architecture_name
from .knowledge_base import InstructionRecord


class InstructionMerger:
    """
    Insertion-ordered accumulator of merged instruction records.

    The first document that introduces a merge key fixes the record's position,
    which is also the default answer when a query has no architecture filter.
    """

    def __init__(self):
        self._records: List[InstructionRecord] = []
        self._index_by_key: Dict[Tuple, int] = {}
        self.merged_count = 0

    @property
    def instructions(self) -> List[InstructionRecord]:
        return self._records

    def add_document(self, architecture_name: str, records: List[InstructionRecord]) -> None:
        """
        Merge the records of one document.

        Records without architecture tags of their own are stamped with the
        document's architecture; records that carry tags get each of them
        normalized independently.
        """
        document_arch = normalize_architecture_name(architecture_name)

        for record in records:
            if record.architectures:
                tags = [normalize_architecture_name(arch) for arch in record.architectures]
                record.architectures = dict.fromkeys(tags)
            else:
                record.architectures = {document_arch: None}
            self.add(record)

    def add(self, record: InstructionRecord) -> None:
        key = record.merge_key()
        index = self._index_by_key.get(key)
        if index is None:
            self._index_by_key[key] = len(self._records)
            self._records.append(record)
            return

        # Encodings and data kinds of the later duplicate are not compared
        self._records[index].add_architectures(record.architectures)
        self.merged_count += 1


def merge_instructions(documents: List[Tuple[str, List[InstructionRecord]]]) -> List[InstructionRecord]:
    """Merge (architecture_name, records) pairs in document order."""
    merger = InstructionMerger()
    for architecture_name, records in documents:
        merger.add_document(architecture_name, records)
    return merger.instructions

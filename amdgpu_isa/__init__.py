"""
AMDGPU ISA knowledge base: compiler for the vendor machine-readable ISA XML
documents and a query engine for editor tooling.
"""

from .architecture import architecture_filter, normalize_architecture_hint, normalize_architecture_name
from .encoding import EncodingVariant, split_encoding_variant
from .knowledge_base import (
    InstructionRecord,
    KnowledgeBase,
    LoadInfo,
    SpecialRegister,
    SpecialRegisterRange,
    load_knowledge_base,
)
from .query import QueryEngine, QueryResult, QueryStatus

__version__ = "0.1.0"

__all__ = [
    "EncodingVariant",
    "InstructionRecord",
    "KnowledgeBase",
    "LoadInfo",
    "QueryEngine",
    "QueryResult",
    "QueryStatus",
    "SpecialRegister",
    "SpecialRegisterRange",
    "architecture_filter",
    "load_knowledge_base",
    "normalize_architecture_hint",
    "normalize_architecture_name",
    "split_encoding_variant",
]

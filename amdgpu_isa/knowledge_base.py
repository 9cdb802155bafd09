"""
ISA Knowledge Base Model

Record types shared by the compiler and the query engine, plus reading and
writing of the compiled knowledge base JSON document:

    {
      "instructions": [ {name, architectures, description, args, arg_kinds,
                         arg_data_kinds, available_encodings}, ... ],
      "special_registers": {"singles": [...], "ranges": [...]}   # or a flat list
    }

Loading never raises: a missing or malformed document yields an empty
knowledge base and a LoadInfo carrying the error message.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union


logger = logging.getLogger(__name__)


# ============================================================================
# Configuration
# ============================================================================

DATA_PATH_ENV = "AMDGPU_LSP_DATA"
DEFAULT_DATA_PATH = Path("data") / "isa.json"


# ============================================================================
# Data Models
# ============================================================================

def _string_list(data: Dict[str, Any], *keys: str) -> List[str]:
    """First present key among `keys` as a list of strings; missing or null means empty."""
    value = None
    for key in keys:
        if data.get(key) is not None:
            value = data[key]
            break
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"'{keys[0]}' must be a list of strings, got {value!r}")
    return value


def _optional_string(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"'{key}' must be a string, got {value!r}")
    return value


class InstructionRecord:
    """A single architecture-tagged instruction entry."""

    def __init__(
        self,
        name: str,
        architectures: Optional[Iterable[str]] = None,
        description: Optional[str] = None,
        args: Optional[List[str]] = None,
        arg_kinds: Optional[List[str]] = None,
        arg_data_kinds: Optional[List[str]] = None,
        available_encodings: Optional[Iterable[str]] = None,
    ):
        self.name = name
        # dict keeps insertion order and set semantics at the same time
        self.architectures: Dict[str, None] = dict.fromkeys(architectures or [])
        self.description = description
        self.args: List[str] = list(args or [])
        self.arg_kinds: List[str] = list(arg_kinds or [])
        self.arg_data_kinds: List[str] = list(arg_data_kinds or [])
        self.available_encodings: List[str] = sorted(set(available_encodings or []))

    def merge_key(self) -> Tuple[str, str, Tuple[str, ...], Tuple[str, ...]]:
        """Identity of the logical instruction across architecture documents."""
        return (self.name, self.description or "", tuple(self.args), tuple(self.arg_kinds))

    def add_architectures(self, architectures: Iterable[str]) -> None:
        for arch in architectures:
            self.architectures.setdefault(arch, None)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to output dictionary format."""
        return {
            "name": self.name,
            "architectures": list(self.architectures),
            "description": self.description,
            "args": self.args,
            "arg_kinds": self.arg_kinds,
            "arg_data_kinds": self.arg_data_kinds,
            "available_encodings": self.available_encodings,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InstructionRecord":
        if not isinstance(data, dict) or not isinstance(data.get("name"), str):
            raise ValueError(f"instruction entry without a name: {data!r}")
        return cls(
            name=data["name"],
            architectures=_string_list(data, "architectures"),
            description=_optional_string(data, "description"),
            args=_string_list(data, "args"),
            arg_kinds=_string_list(data, "arg_kinds", "arg_types"),
            arg_data_kinds=_string_list(data, "arg_data_kinds", "arg_data_types"),
            available_encodings=_string_list(data, "available_encodings"),
        )

    def __repr__(self) -> str:
        return f"InstructionRecord({self.name}, {list(self.architectures)})"


class SpecialRegister:
    """A named, non-general-purpose machine register."""

    def __init__(self, name: str, description: Optional[str] = None):
        self.name = name
        self.description = description

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "description": self.description}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SpecialRegister":
        if not isinstance(data, dict) or not isinstance(data.get("name"), str):
            raise ValueError(f"special register entry without a name: {data!r}")
        return cls(data["name"], _optional_string(data, "description"))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SpecialRegister):
            return NotImplemented
        return (self.name, self.description) == (other.name, other.description)

    def __repr__(self) -> str:
        return f"SpecialRegister({self.name})"


class SpecialRegisterRange:
    """
    Compressed form of a contiguous register family such as ttmp0..ttmp15.

    Every member shares `description` unless an override exists for its index.
    """

    def __init__(
        self,
        prefix: str,
        start: int,
        count: int,
        description: Optional[str] = None,
        overrides: Optional[Dict[int, Optional[str]]] = None,
    ):
        self.prefix = prefix
        self.start = start
        self.count = count
        self.description = description
        self.overrides: Dict[int, Optional[str]] = dict(overrides or {})

    def expand(self) -> List[SpecialRegister]:
        """Expand back into exactly `count` individual registers."""
        registers = []
        for index in range(self.start, self.start + self.count):
            description = self.overrides.get(index, self.description)
            registers.append(SpecialRegister(f"{self.prefix}{index}", description))
        return registers

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "prefix": self.prefix,
            "start": self.start,
            "count": self.count,
        }
        if self.description is not None:
            result["description"] = self.description
        if self.overrides:
            result["overrides"] = [
                {"index": index, "description": description}
                for index, description in sorted(self.overrides.items())
            ]
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SpecialRegisterRange":
        try:
            overrides = {int(item["index"]): item.get("description") for item in data.get("overrides", [])}
            return cls(
                prefix=str(data["prefix"]),
                start=int(data["start"]),
                count=int(data["count"]),
                description=data.get("description"),
                overrides=overrides,
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ValueError(f"malformed register range {data!r}: {e}") from e

    def __repr__(self) -> str:
        return f"SpecialRegisterRange({self.prefix}{self.start}..{self.prefix}{self.start + self.count - 1})"


class CompressedRegisters:
    """The {singles, ranges} form of the register table."""

    def __init__(
        self,
        singles: Optional[List[SpecialRegister]] = None,
        ranges: Optional[List[SpecialRegisterRange]] = None,
    ):
        self.singles: List[SpecialRegister] = list(singles or [])
        self.ranges: List[SpecialRegisterRange] = list(ranges or [])

    def expand(self) -> List[SpecialRegister]:
        expanded = list(self.singles)
        for register_range in self.ranges:
            expanded.extend(register_range.expand())
        return expanded

    def to_dict(self) -> Dict[str, Any]:
        return {
            "singles": [reg.to_dict() for reg in self.singles],
            "ranges": [rng.to_dict() for rng in self.ranges],
        }


RegisterTable = Union[List[SpecialRegister], CompressedRegisters]


class KnowledgeBase:
    """Instruction table plus register table, flat or range-compressed."""

    def __init__(
        self,
        instructions: Optional[List[InstructionRecord]] = None,
        special_registers: Optional[RegisterTable] = None,
    ):
        self.instructions: List[InstructionRecord] = list(instructions or [])
        self.special_registers: RegisterTable = (
            special_registers if special_registers is not None else CompressedRegisters()
        )

    def expanded_registers(self) -> List[SpecialRegister]:
        """All registers as individual records, sorted by name."""
        if isinstance(self.special_registers, CompressedRegisters):
            registers = self.special_registers.expand()
        else:
            registers = list(self.special_registers)
        return sorted(registers, key=lambda reg: reg.name)

    def to_dict(self) -> Dict[str, Any]:
        if isinstance(self.special_registers, CompressedRegisters):
            registers: Any = self.special_registers.to_dict()
        else:
            registers = [reg.to_dict() for reg in self.special_registers]
        return {
            "instructions": [instr.to_dict() for instr in self.instructions],
            "special_registers": registers,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False) + "\n"

    @classmethod
    def from_dict(cls, data: Any) -> "KnowledgeBase":
        """
        Build a knowledge base from decoded JSON.

        Raises:
            ValueError: If the document does not have the expected structure
        """
        if not isinstance(data, dict):
            raise ValueError("knowledge base root must be an object")

        raw_instructions = data.get("instructions", [])
        if not isinstance(raw_instructions, list):
            raise ValueError("'instructions' must be a list")
        instructions = [InstructionRecord.from_dict(item) for item in raw_instructions]

        raw_registers = data.get("special_registers", [])
        registers: RegisterTable
        if isinstance(raw_registers, list):
            registers = [SpecialRegister.from_dict(item) for item in raw_registers]
        elif isinstance(raw_registers, dict):
            raw_singles = raw_registers.get("singles", [])
            raw_ranges = raw_registers.get("ranges", [])
            if not isinstance(raw_singles, list) or not isinstance(raw_ranges, list):
                raise ValueError("'singles' and 'ranges' must be lists")
            registers = CompressedRegisters(
                singles=[SpecialRegister.from_dict(item) for item in raw_singles],
                ranges=[SpecialRegisterRange.from_dict(item) for item in raw_ranges],
            )
        else:
            raise ValueError("'special_registers' must be a list or a {singles, ranges} object")

        return cls(instructions, registers)


# ============================================================================
# Reading and Writing
# ============================================================================

class LoadInfo:
    """Where the knowledge base came from and why loading failed, if it did."""

    def __init__(self, data_path: str, load_error: Optional[str] = None):
        self.data_path = data_path
        self.load_error = load_error

    @property
    def ok(self) -> bool:
        return self.load_error is None

    def __repr__(self) -> str:
        return f"LoadInfo({self.data_path}, error={self.load_error!r})"


def resolve_data_path(path: Optional[Union[str, Path]] = None) -> Path:
    """Explicit path, else $AMDGPU_LSP_DATA, else data/isa.json."""
    if path is not None:
        return Path(path)
    return Path(os.environ.get(DATA_PATH_ENV, str(DEFAULT_DATA_PATH)))


def load_knowledge_base(path: Optional[Union[str, Path]] = None) -> Tuple[KnowledgeBase, LoadInfo]:
    """
    Load a compiled knowledge base.

    Failures are not raised: the caller gets an empty knowledge base and a
    LoadInfo whose load_error explains what went wrong.
    """
    data_path = resolve_data_path(path)
    info = LoadInfo(str(data_path))

    try:
        with open(data_path, 'r', encoding='utf-8') as f:
            contents = f.read()
    except (OSError, UnicodeDecodeError) as e:
        info.load_error = f"Failed to read isa.json: {e}"
        logger.error("%s (path: %s)", info.load_error, data_path)
        return KnowledgeBase(), info

    try:
        knowledge_base = KnowledgeBase.from_dict(json.loads(contents))
    except ValueError as e:
        # json.JSONDecodeError is a ValueError too
        info.load_error = f"Failed to parse isa.json: {e}"
        logger.error("%s (path: %s)", info.load_error, data_path)
        return KnowledgeBase(), info

    logger.info("Loaded %d instruction records from %s", len(knowledge_base.instructions), data_path)
    return knowledge_base, info


def write_knowledge_base(knowledge_base: KnowledgeBase, output_path: Union[str, Path]) -> None:
    """Write the knowledge base as pretty JSON, creating parent directories."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(knowledge_base.to_json())

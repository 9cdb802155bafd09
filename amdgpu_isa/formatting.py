"""
Presentation Helpers

Turns knowledge-base records into the text an editor shows: hover markdown
for instructions and special registers, signature help with parameter
offsets, and compact architecture lists.

Example hover for v_add_f32_e32:

    **v_add_f32**

    vdst: reg f32, src0: reg/inline f32, vsrc1: reg f32

    Add two single-precision floats.

    Encoding: VOP2 (32-bit): Vector ALU operation with two sources
"""

import re
from typing import Dict, Iterable, List, Optional, Tuple

from .architecture import FAMILIES
from .encoding import EncodingVariant, encoding_summary, split_encoding_variant
from .knowledge_base import InstructionRecord, SpecialRegister
from .query import QueryEngine
from .text_utils import in_comment, leading_mnemonic, utf16_to_index


# ============================================================================
# Abbreviations
# ============================================================================

ARG_KIND_LABELS = {
    "register": "reg",
    "register_or_inline": "reg/inline",
    "immediate": "imm",
}

DATA_FORMAT_LABELS = {
    "FMT_NUM_B32": "b32",
    "FMT_NUM_B64": "b64",
    "FMT_NUM_F16": "f16",
    "FMT_NUM_F32": "f32",
    "FMT_NUM_F64": "f64",
    "FMT_NUM_BF16": "bf16",
    "FMT_NUM_I8": "i8",
    "FMT_NUM_I16": "i16",
    "FMT_NUM_I32": "i32",
    "FMT_NUM_I64": "i64",
    "FMT_NUM_U16": "u16",
    "FMT_NUM_U32": "u32",
    "FMT_NUM_U64": "u64",
    "FMT_ANY": "any",
}


def format_mnemonic(name: str) -> str:
    return name.lower()


def format_arg_kind(arg_kind: str) -> Optional[str]:
    if arg_kind == "unknown":
        return None
    return ARG_KIND_LABELS.get(arg_kind, arg_kind)


def format_data_kind(data_kind: str) -> Optional[str]:
    return DATA_FORMAT_LABELS.get(data_kind)


def format_argument(record: InstructionRecord, index: int) -> str:
    """One argument as "name: kind format", dropping unknown parts."""
    arg = record.args[index]
    kind = format_arg_kind(record.arg_kinds[index] if index < len(record.arg_kinds) else "unknown")
    data = format_data_kind(record.arg_data_kinds[index]) if index < len(record.arg_data_kinds) else None

    type_label = " ".join(part for part in (kind, data) if part)
    if not type_label:
        return arg
    return f"{arg}: {type_label}"


# ============================================================================
# Hover
# ============================================================================

def format_hover(record: InstructionRecord, variant: EncodingVariant = EncodingVariant.NATIVE) -> str:
    """Markdown hover for an instruction, with an encoding line for suffixed mnemonics."""
    blocks = [f"**{format_mnemonic(record.name)}**"]

    if record.args:
        blocks.append(", ".join(format_argument(record, i) for i in range(len(record.args))))

    if record.description:
        blocks.append(record.description)

    if variant is not EncodingVariant.NATIVE:
        blocks.append(f"Encoding: {encoding_summary(record.available_encodings, variant)}")

    return "\n\n".join(blocks)


def format_register_hover(register: SpecialRegister) -> str:
    blocks = [f"**{register.name}**"]
    if register.description:
        blocks.append(register.description)
    return "\n\n".join(blocks)


def hover_for_token(engine: QueryEngine, token: str, architecture: Optional[str] = None) -> Optional[str]:
    """
    Hover text for a word under the cursor.

    Special registers are checked first, case-insensitively. Otherwise the
    token is resolved as an instruction; a name that exists only for other
    architectures produces no hover.
    """
    register = engine.lookup_register(token)
    if register is not None:
        return format_register_hover(register)

    result = engine.resolve(token, architecture)
    if result.found:
        return format_hover(result.record, result.variant)
    return None


# ============================================================================
# Signature Help
# ============================================================================

class SignatureHelp:
    """
    Signature of the instruction on the current line.

    Attributes:
        label: "mnemonic arg0, arg1, ..."
        parameters: (start, end, documentation) offsets into label per argument
        documentation: Instruction description
        active_parameter: Index of the argument under the cursor, if any
    """

    def __init__(
        self,
        label: str,
        parameters: List[Tuple[int, int, Optional[str]]],
        documentation: Optional[str] = None,
        active_parameter: Optional[int] = None,
    ):
        self.label = label
        self.parameters = parameters
        self.documentation = documentation
        self.active_parameter = active_parameter

    def __repr__(self) -> str:
        return f"SignatureHelp({self.label!r}, active={self.active_parameter})"


def arguments_before_cursor(line_before_cursor: str) -> Optional[str]:
    """Text after the mnemonic and its first whitespace; None while on the mnemonic."""
    parts = re.split(r'\s', line_before_cursor.lstrip(), maxsplit=1)
    if len(parts) < 2:
        return None
    return parts[1]


def active_parameter_index(record: InstructionRecord, line_before_cursor: str) -> Optional[int]:
    """Count commas after the mnemonic to find the argument being typed."""
    arguments = arguments_before_cursor(line_before_cursor)
    if arguments is None or not record.args:
        return None
    return min(arguments.count(','), len(record.args) - 1)


def build_signature(record: InstructionRecord, line_before_cursor: str) -> Optional[SignatureHelp]:
    """Build the signature for a record; None when the cursor is on the mnemonic."""
    if arguments_before_cursor(line_before_cursor) is None:
        return None

    label = format_mnemonic(record.name)
    parameters: List[Tuple[int, int, Optional[str]]] = []

    if record.args:
        label += " "
        offset = len(label)
        label += ", ".join(record.args)

        for index, arg in enumerate(record.args):
            arg_kind = record.arg_kinds[index] if index < len(record.arg_kinds) else ""
            compact = arg_kind.replace("register", "reg")
            parameters.append((offset, offset + len(arg), compact or None))
            offset += len(arg) + len(", ")

    return SignatureHelp(
        label=label,
        parameters=parameters,
        documentation=record.description,
        active_parameter=active_parameter_index(record, line_before_cursor),
    )


def signature_for_line(
    engine: QueryEngine,
    line: str,
    character: int,
    architecture: Optional[str] = None,
) -> Optional[SignatureHelp]:
    """
    Signature help for a cursor at UTF-16 column `character` of `line`.

    Nothing is offered inside a ';' comment, for unknown mnemonics, or when
    the mnemonic exists only for other architectures.
    """
    cursor = utf16_to_index(line, character)
    if in_comment(line, cursor):
        return None

    mnemonic = leading_mnemonic(line)
    if not mnemonic:
        return None

    result = engine.resolve(mnemonic, architecture)
    if not result.found:
        return None

    return build_signature(result.record, line[:cursor])


# ============================================================================
# Architecture Lists
# ============================================================================

def _version_sort_key(version: str) -> Tuple:
    return tuple((0, int(part), "") if part.isdigit() else (1, 0, part) for part in version.split('.'))


def format_architectures(architectures: Iterable[str]) -> str:
    """
    Group architecture tags by family into compact notation.

    Examples:
        ["rdna3", "rdna3.5", "rdna4"]   -> "RDNA 3/3.5/4"
        ["cdna3", "rdna4"]              -> "CDNA 3, RDNA 4"
        ["rdna"]                        -> "RDNA"
    """
    versions: Dict[str, List[str]] = {}
    others: List[str] = []

    for arch in architectures:
        family = next((fam for fam in FAMILIES if arch.startswith(fam)), None)
        if family is None:
            if arch not in others:
                others.append(arch)
            continue
        family_versions = versions.setdefault(family, [])
        version = arch[len(family):]
        if version and version not in family_versions:
            family_versions.append(version)

    groups = []
    for family in sorted(versions):
        family_versions = sorted(versions[family], key=_version_sort_key)
        if family_versions:
            groups.append(f"{family.upper()} {'/'.join(family_versions)}")
        else:
            groups.append(family.upper())
    groups.extend(others)
    return ", ".join(groups)


def describe_token(token: str) -> str:
    """Short description of how a token splits, for diagnostics."""
    base, variant = split_encoding_variant(token)
    if variant is EncodingVariant.NATIVE:
        return base
    return f"{base} ({variant.value})"

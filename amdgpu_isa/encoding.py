"""
Encoding Variants

Assembler mnemonics may carry a suffix selecting a concrete bit encoding
(v_add_f32_e32, v_add_f32_e64, v_mov_b32_dpp, ...). This module splits such
suffixes off, picks the matching encoding from a record's available
encodings, and describes encodings in human terms.
"""

from enum import Enum
from typing import Iterable, NamedTuple, Optional


class EncodingVariant(Enum):
    NATIVE = "native"
    E32 = "e32"
    E64 = "e64"
    DPP = "dpp"
    SDWA = "sdwa"
    E64_DPP = "e64_dpp"


class SplitInstruction(NamedTuple):
    base: str
    variant: EncodingVariant


# Longer suffixes first so that "_e64_dpp" is never taken for "_dpp"
VARIANT_SUFFIXES = (
    ("_e64_dpp", EncodingVariant.E64_DPP),
    ("_e32", EncodingVariant.E32),
    ("_e64", EncodingVariant.E64),
    ("_dpp", EncodingVariant.DPP),
    ("_sdwa", EncodingVariant.SDWA),
)

# Shown when no concrete encoding of the record matches the variant
VARIANT_LABELS = {
    EncodingVariant.NATIVE: "Native encoding",
    EncodingVariant.E32: "32-bit encoding",
    EncodingVariant.E64: "VOP3 (64-bit)",
    EncodingVariant.DPP: "DPP (data-parallel primitives)",
    EncodingVariant.SDWA: "SDWA (sub-DWORD addressing)",
    EncodingVariant.E64_DPP: "VOP3 + DPP",
}

E32_ENCODINGS = ("ENC_VOP1", "ENC_VOP2", "ENC_VOPC")

ENCODING_DESCRIPTIONS = {
    # Standard encodings
    "ENC_VOP1": "VOP1 (32-bit): Vector ALU operation with one source",
    "ENC_VOP2": "VOP2 (32-bit): Vector ALU operation with two sources",
    "ENC_VOPC": "VOPC (32-bit): Vector ALU comparison operation",
    "ENC_VOP3": "VOP3 (64-bit): Extended vector ALU with modifiers and additional operand flexibility",
    "ENC_VOP3P": "VOP3P (64-bit): Packed vector ALU operation",

    # DPP encodings
    "VOP1_VOP_DPP": "VOP1 + DPP16: Data-parallel primitives with 16-lane swizzle",
    "VOP1_VOP_DPP16": "VOP1 + DPP16: Data-parallel primitives with 16-lane swizzle",
    "VOP1_VOP_DPP8": "VOP1 + DPP8: Data-parallel primitives with 8-lane swizzle",
    "VOP2_VOP_DPP": "VOP2 + DPP16: Data-parallel primitives with 16-lane swizzle",
    "VOP2_VOP_DPP16": "VOP2 + DPP16: Data-parallel primitives with 16-lane swizzle",
    "VOP2_VOP_DPP8": "VOP2 + DPP8: Data-parallel primitives with 8-lane swizzle",
    "VOPC_VOP_DPP": "VOPC + DPP16: Comparison with data-parallel primitives (16-lane)",
    "VOPC_VOP_DPP16": "VOPC + DPP16: Comparison with data-parallel primitives (16-lane)",
    "VOPC_VOP_DPP8": "VOPC + DPP8: Comparison with data-parallel primitives (8-lane)",
    "VOP3_VOP_DPP16": "VOP3 + DPP16: Extended VOP3 with data-parallel primitives (16-lane)",
    "VOP3_VOP_DPP8": "VOP3 + DPP8: Extended VOP3 with data-parallel primitives (8-lane)",
    "VOP3P_VOP_DPP16": "VOP3P + DPP16: Packed operation with data-parallel primitives (16-lane)",
    "VOP3P_VOP_DPP8": "VOP3P + DPP8: Packed operation with data-parallel primitives (8-lane)",
    "VOP3_SDST_ENC_VOP_DPP16": "VOP3 SDST + DPP16: VOP3 with scalar destination and DPP (16-lane)",
    "VOP3_SDST_ENC_VOP_DPP8": "VOP3 SDST + DPP8: VOP3 with scalar destination and DPP (8-lane)",

    # SDWA encodings
    "VOP1_VOP_SDWA": "VOP1 + SDWA: Sub-DWORD addressing for byte/word operations",
    "VOP2_VOP_SDWA": "VOP2 + SDWA: Sub-DWORD addressing for byte/word operations",
    "VOPC_VOP_SDWA": "VOPC + SDWA: Comparison with sub-DWORD addressing",

    # Literal encodings
    "VOP1_INST_LITERAL": "VOP1 + Literal (64-bit): Includes 32-bit inline constant",
    "VOP2_INST_LITERAL": "VOP2 + Literal (64-bit): Includes 32-bit inline constant",
    "VOPC_INST_LITERAL": "VOPC + Literal (64-bit): Includes 32-bit inline constant",
    "VOP3_INST_LITERAL": "VOP3 + Literal (96-bit): VOP3 with 32-bit inline constant",
    "VOP3P_INST_LITERAL": "VOP3P + Literal (96-bit): Packed operation with 32-bit inline constant",
    "VOP3_SDST_ENC_INST_LITERAL": "VOP3 SDST + Literal (96-bit): VOP3 with scalar destination and literal",

    # Special VOP3 variants
    "VOP3_SDST_ENC": "VOP3 SDST (64-bit): VOP3 with scalar destination",

    # Scalar encodings
    "ENC_SOP1": "SOP1 (32-bit): Scalar ALU operation with one source",
    "ENC_SOP2": "SOP2 (32-bit): Scalar ALU operation with two sources",
    "ENC_SOPC": "SOPC (32-bit): Scalar ALU comparison operation",
    "ENC_SOPK": "SOPK (32-bit): Scalar operation with 16-bit inline constant",
    "ENC_SOPP": "SOPP (32-bit): Scalar operation for program control",
    "SOP1_INST_LITERAL": "SOP1 + Literal (64-bit): Scalar operation with 32-bit inline constant",
    "SOP2_INST_LITERAL": "SOP2 + Literal (64-bit): Scalar operation with 32-bit inline constant",
    "SOPC_INST_LITERAL": "SOPC + Literal (64-bit): Scalar comparison with 32-bit inline constant",
    "SOPK_INST_LITERAL": "SOPK + Literal (64-bit): Scalar operation with extended constant",

    # Memory encodings
    "ENC_SMEM": "SMEM: Scalar memory operation",
    "ENC_DS": "DS: Data share (LDS/GDS) operation",
    "ENC_MUBUF": "MUBUF: Untyped buffer memory operation",
    "ENC_MTBUF": "MTBUF: Typed buffer memory operation",
    "ENC_MIMG": "MIMG: Image memory operation",
    "MIMG_NSA1": "MIMG NSA: Non-sequential address mode for images",
    "ENC_FLAT": "FLAT: Flat addressing (global/scratch/LDS)",
    "ENC_FLAT_SCRATCH": "FLAT Scratch: Flat addressing for scratch memory",
    "ENC_FLAT_GLOBAL": "FLAT Global: Flat addressing for global memory",

    # Interpolation and other
    "ENC_VINTERP": "VINTERP: Vector interpolation operation",
    "ENC_LDSDIR": "LDSDIR: LDS direct read operation",
    "ENC_EXP": "EXP: Export operation for pixel/vertex data",
    "VOPDXY": "VOPDXY: Vector operation with partial derivatives",
    "VOPDXY_INST_LITERAL": "VOPDXY + Literal: Vector partial derivative with inline constant",
}


# ============================================================================
# Variant Handling
# ============================================================================

def split_encoding_variant(mnemonic: str) -> SplitInstruction:
    """
    Split an encoding-variant suffix off a mnemonic.

    Examples:
        v_add_f32_e32       -> ("v_add_f32", E32)
        v_add_f32_e64_dpp   -> ("v_add_f32", E64_DPP)
        V_MOV_B32_DPP       -> ("V_MOV_B32", DPP)
        s_endpgm            -> ("s_endpgm", NATIVE)
    """
    lower = mnemonic.lower()
    for suffix, variant in VARIANT_SUFFIXES:
        if lower.endswith(suffix):
            return SplitInstruction(mnemonic[:-len(suffix)], variant)
    return SplitInstruction(mnemonic, EncodingVariant.NATIVE)


def _first(encodings: Iterable[str], predicate) -> Optional[str]:
    return next((enc for enc in encodings if predicate(enc)), None)


def find_matching_encoding(available_encodings: Iterable[str], variant: EncodingVariant) -> Optional[str]:
    """
    Pick the concrete encoding a variant refers to.

    Wider DPP swizzles (DPP16) are preferred over narrower ones (DPP8).
    """
    encodings = list(available_encodings)

    if variant is EncodingVariant.NATIVE:
        return _first(encodings, lambda enc: enc.startswith("ENC_") and "LITERAL" not in enc)
    if variant is EncodingVariant.E32:
        return _first(encodings, lambda enc: enc in E32_ENCODINGS)
    if variant is EncodingVariant.E64:
        return _first(encodings, lambda enc: enc == "ENC_VOP3")
    if variant is EncodingVariant.DPP:
        return (_first(encodings, lambda enc: "DPP16" in enc)
                or _first(encodings, lambda enc: "DPP" in enc))
    if variant is EncodingVariant.SDWA:
        return _first(encodings, lambda enc: "SDWA" in enc)
    if variant is EncodingVariant.E64_DPP:
        vop3 = [enc for enc in encodings if enc.startswith("VOP3")]
        return (_first(vop3, lambda enc: "DPP16" in enc)
                or _first(vop3, lambda enc: "DPP" in enc))
    return None


def describe_encoding(encoding_name: str) -> Optional[str]:
    return ENCODING_DESCRIPTIONS.get(encoding_name)


def encoding_summary(available_encodings: Iterable[str], variant: EncodingVariant) -> str:
    """
    Human description of the encoding a variant selects.

    Falls back to the raw encoding name when it has no description, and to a
    short variant label when no available encoding matches.
    """
    encoding_name = find_matching_encoding(available_encodings, variant)
    if encoding_name is None:
        return VARIANT_LABELS[variant]
    return describe_encoding(encoding_name) or encoding_name

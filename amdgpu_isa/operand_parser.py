"""
AMDGPU Operand Classifier

Maps raw operand-type tags from the vendor XML (OPR_VGPR, OPR_SIMM16, ...) to
a small set of semantic categories, and turns an instruction's encodings into
the ordered, display-ready argument list used by hover and signature help.

Usage:
    from amdgpu_isa.operand_parser import build_args

    args, arg_kinds, arg_data_kinds = build_args(instruction.encodings)
    # (["vdst", "src0", "src1"], ["register", "register_or_inline", ...], ["FMT_NUM_F32", ...])
"""

from typing import List, Optional, Tuple


class Operand:
    """A single operand declared by an instruction encoding (compile time only)."""

    def __init__(
        self,
        field_name: Optional[str] = None,
        operand_type: Optional[str] = None,
        data_format_name: Optional[str] = None,
        size: Optional[int] = None,
        is_input: Optional[bool] = None,
        is_output: Optional[bool] = None,
        is_implicit: Optional[bool] = None,
        order: Optional[int] = None,
    ):
        self.field_name = field_name
        self.operand_type = operand_type
        self.data_format_name = data_format_name
        self.size = size
        self.is_input = is_input
        self.is_output = is_output
        self.is_implicit = is_implicit
        self.order = order

    def label(self) -> str:
        """Display label: field name, else raw type tag, else a placeholder."""
        return self.field_name or self.operand_type or "operand"

    def __repr__(self) -> str:
        return f"Operand({self.label()}, {self.operand_type}, order={self.order})"


class InstructionEncoding:
    """One concrete encoding of an instruction with its operand declarations."""

    def __init__(self, encoding_name: Optional[str] = None):
        self.encoding_name = encoding_name
        self.operands: List[Operand] = []

    def __repr__(self) -> str:
        return f"InstructionEncoding({self.encoding_name}, {len(self.operands)} operands)"


# ============================================================================
# Operand Type Categories
# ============================================================================

IMMEDIATE_TYPES = {"OPR_SMEM_OFFSET", "OPR_DELAY"}
IMMEDIATE_PREFIX = "OPR_SIMM"

LABEL_TYPES = {"OPR_LABEL"}

MEMORY_TYPES = {"OPR_DSMEM", "OPR_FLAT_SCRATCH"}

REGISTER_TYPES = {
    "OPR_VGPR",
    "OPR_SREG",
    "OPR_SDST",
    "OPR_SSRC",
    "OPR_SSRC_LANESEL",
    "OPR_SSRC_SPECIAL_SCC",
    "OPR_SRC",
    "OPR_SRC_VGPR",
    "OPR_VCC",
    "OPR_EXEC",
    "OPR_SDST_EXEC",
    "OPR_SDST_M0",
    "OPR_SDST_NULL",
    "OPR_PC",
    "OPR_TGT",
}

# Source operand that accepts either a VGPR or an inline constant
REGISTER_OR_INLINE_TYPES = {"OPR_SRC_VGPR_OR_INLINE"}

SPECIAL_TYPES = {
    "OPR_SENDMSG",
    "OPR_SENDMSG_RTN",
    "OPR_WAITCNT",
    "OPR_WAITCNT_DEPCTR",
    "OPR_WAIT_EVENT",
    "OPR_HWREG",
    "OPR_ATTR",
    "OPR_VERSION",
    "OPR_CLAUSE",
}

OPERAND_KINDS = (
    "immediate",
    "label",
    "memory",
    "register",
    "register_or_inline",
    "special",
    "unknown",
)

UNKNOWN_DATA_FORMAT = "unknown"


# ============================================================================
# Classification
# ============================================================================

def classify_operand(operand_type: Optional[str]) -> str:
    """
    Classify a raw operand-type tag into a semantic category.

    Examples:
        classify_operand("OPR_SIMM16")              -> "immediate"
        classify_operand("OPR_SRC_VGPR_OR_INLINE")  -> "register_or_inline"
        classify_operand("OPR_HWREG")               -> "special"
        classify_operand(None)                      -> "unknown"
    """
    if not operand_type:
        return "unknown"
    if operand_type.startswith(IMMEDIATE_PREFIX) or operand_type in IMMEDIATE_TYPES:
        return "immediate"
    if operand_type in LABEL_TYPES:
        return "label"
    if operand_type in MEMORY_TYPES:
        return "memory"
    if operand_type in REGISTER_OR_INLINE_TYPES:
        return "register_or_inline"
    if operand_type in REGISTER_TYPES:
        return "register"
    if operand_type in SPECIAL_TYPES:
        return "special"
    return "unknown"


def build_args(encodings: List[InstructionEncoding]) -> Tuple[List[str], List[str], List[str]]:
    """
    Build parallel (args, arg_kinds, arg_data_kinds) lists for an instruction.

    Only the first declared encoding is used; encodings of one instruction are
    operand-compatible for listing purposes. Operands are sorted by declared
    order (undeclared order sorts last, stably) and implicit operands are
    dropped.
    """
    if not encodings:
        return ([], [], [])

    operands = sorted(
        encodings[0].operands,
        key=lambda op: (op.order is None, op.order if op.order is not None else 0),
    )

    args = []
    arg_kinds = []
    arg_data_kinds = []

    for operand in operands:
        if operand.is_implicit is True:
            continue
        args.append(operand.label())
        arg_kinds.append(classify_operand(operand.operand_type))
        arg_data_kinds.append(operand.data_format_name or UNKNOWN_DATA_FORMAT)

    return (args, arg_kinds, arg_data_kinds)

"""Shared fixtures: ISA XML documents written to tmp_path and a sample knowledge base."""

import pytest

from amdgpu_isa.knowledge_base import InstructionRecord, KnowledgeBase, SpecialRegister
from amdgpu_isa.special_registers import compress_special_registers
from isa_samples import TTMP_REGISTERS, isa_document_xml


@pytest.fixture
def write_isa_document(tmp_path):
    """Write an ISA XML document into tmp_path and return its path."""
    def _write(filename, architecture, instructions=(), registers=()):
        path = tmp_path / filename
        path.write_text(isa_document_xml(architecture, instructions, registers), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def v_add_f32_rdna():
    return InstructionRecord(
        name="V_ADD_F32",
        architectures=["rdna3", "rdna3.5"],
        description="Add two single-precision floats.",
        args=["vdst", "src0", "vsrc1"],
        arg_kinds=["register", "register_or_inline", "register"],
        arg_data_kinds=["FMT_NUM_F32", "FMT_NUM_F32", "FMT_NUM_F32"],
        available_encodings=["ENC_VOP2", "ENC_VOP3", "VOP2_VOP_DPP16", "VOP3_VOP_DPP16"],
    )


@pytest.fixture
def sample_knowledge_base(v_add_f32_rdna):
    """Knowledge base with an RDNA 3 / 3.5 add, a CDNA 3 add and a few registers."""
    v_add_f32_cdna = InstructionRecord(
        name="V_ADD_F32",
        architectures=["cdna3"],
        description="Add two single-precision floats (CDNA).",
        args=["vdst", "src0", "src1"],
        arg_kinds=["register", "register_or_inline", "register_or_inline"],
        arg_data_kinds=["FMT_NUM_F32", "FMT_NUM_F32", "FMT_NUM_F32"],
        available_encodings=["ENC_VOP2", "ENC_VOP3"],
    )
    v_mov_b32 = InstructionRecord(
        name="V_MOV_B32",
        architectures=["rdna3", "rdna4"],
        description="Move data to a VGPR.",
        args=["vdst", "src0"],
        arg_kinds=["register", "register_or_inline"],
        arg_data_kinds=["FMT_NUM_B32", "FMT_NUM_B32"],
        available_encodings=["ENC_VOP1", "ENC_VOP3", "VOP1_VOP_DPP16", "VOP1_VOP_DPP8"],
    )
    s_endpgm = InstructionRecord(
        name="S_ENDPGM",
        architectures=["rdna3", "rdna4", "cdna3"],
        description="End of program; terminate wavefront.",
        available_encodings=["ENC_SOPP"],
    )
    registers = [SpecialRegister(name, description) for name, description in TTMP_REGISTERS]
    registers.append(SpecialRegister("exec_lo", "Lower 32 bits of EXEC (lane execution mask)."))
    registers.append(SpecialRegister("m0", "Miscellaneous register 0."))
    return KnowledgeBase(
        [v_add_f32_rdna, v_add_f32_cdna, v_mov_b32, s_endpgm],
        compress_special_registers(registers),
    )

"""Tests for extraction from AMD machine-readable ISA XML documents."""

import pytest

from amdgpu_isa.xml_extractor import MalformedSourceError, extract_document, parse_bool, parse_int
from isa_samples import S_ENDPGM_XML, TTMP_REGISTERS, V_ADD_F32_XML, instruction_xml, operand_xml


class TestFieldParsing:
    """Attribute values are parsed leniently."""

    def test_parse_bool(self):
        assert parse_bool("true") is True
        assert parse_bool("FALSE") is False
        assert parse_bool(" True ") is True
        assert parse_bool("yes") is None
        assert parse_bool(None) is None

    def test_parse_int(self):
        assert parse_int("3") == 3
        assert parse_int(" 12 ") == 12
        assert parse_int("x") is None
        assert parse_int(None) is None


class TestExtractDocument:
    """Instruction and register extraction from one document."""

    def test_document_architecture(self, write_isa_document):
        path = write_isa_document("rdna3.xml", "AMD RDNA 3", [V_ADD_F32_XML])
        document = extract_document(path)
        assert document.architecture_name == "AMD RDNA 3"
        assert document.path == path

    def test_instruction_record(self, write_isa_document):
        path = write_isa_document("rdna3.xml", "AMD RDNA 3", [V_ADD_F32_XML])
        document = extract_document(path)

        assert [instr.name for instr in document.instructions] == ["V_ADD_F32"]
        record = document.instructions[0].to_record()
        assert record.description == "Add two single-precision floats."
        assert record.args == ["vdst", "src0", "vsrc1"]
        assert record.arg_kinds == ["register", "register_or_inline", "register"]
        assert record.arg_data_kinds == ["FMT_NUM_F32"] * 3
        assert record.available_encodings == ["ENC_VOP2", "ENC_VOP3", "VOP2_VOP_DPP16"]
        assert list(record.architectures) == []

    def test_operand_attributes(self, write_isa_document):
        path = write_isa_document("rdna3.xml", "AMD RDNA 3", [V_ADD_F32_XML])
        operands = extract_document(path).instructions[0].encodings[0].operands
        vdst = operands[0]
        assert vdst.field_name == "vdst"
        assert vdst.operand_type == "OPR_VGPR"
        assert vdst.is_output is True
        assert vdst.is_input is False
        assert vdst.is_implicit is False
        assert vdst.order == 1
        assert vdst.size == 32

    def test_implicit_operand_not_listed(self, write_isa_document):
        path = write_isa_document("rdna3.xml", "AMD RDNA 3", [S_ENDPGM_XML])
        record = extract_document(path).instructions[0].to_record()
        assert record.args == []
        assert record.available_encodings == ["ENC_SOPP"]

    def test_nested_architecture_tags(self, write_isa_document):
        """ArchitectureName inside an Instruction belongs to that instruction."""
        multi = instruction_xml(
            "V_DOT2_F32_F16", "Dot product.",
            [("ENC_VOP3P", [operand_xml("vdst", "OPR_VGPR", order=1)])],
            architectures=["AMD RDNA 3", "AMD RDNA 3.5"],
        )
        path = write_isa_document("multi.xml", "AMD RDNA Family", [multi])
        document = extract_document(path)

        assert document.architecture_name == "AMD RDNA Family"
        assert document.instructions[0].architectures == ["AMD RDNA 3", "AMD RDNA 3.5"]

    def test_aliases_do_not_replace_name(self, write_isa_document):
        aliased = instruction_xml(
            "S_MOV_B32", "Move.",
            [("ENC_SOP1", [operand_xml("sdst", "OPR_SDST", order=1)])],
            aliases=["S_MOV_ALIAS"],
        )
        path = write_isa_document("rdna3.xml", "AMD RDNA 3", [aliased])
        assert [instr.name for instr in extract_document(path).instructions] == ["S_MOV_B32"]

    def test_special_registers(self, write_isa_document):
        registers = TTMP_REGISTERS[:2] + [("exec_lo", "Exec low."), ("vcc_hi", None)]
        path = write_isa_document("rdna3.xml", "AMD RDNA 3", registers=registers)
        extracted = extract_document(path).special_registers

        assert [reg.name for reg in extracted] == ["ttmp0", "ttmp1", "exec_lo", "vcc_hi"]
        assert extracted[0].description == "Trap temporary register."
        assert extracted[3].description is None

    def test_html_description_unescaped(self, write_isa_document):
        path = write_isa_document("rdna3.xml", "AMD RDNA 3", registers=[("m0", "<p>See above.</p>")])
        assert extract_document(path).special_registers[0].description == "<p>See above.</p>"

    def test_empty_document(self, write_isa_document):
        document = extract_document(write_isa_document("empty.xml", "AMD CDNA 3"))
        assert document.instructions == []
        assert document.special_registers == []


class TestMalformedSource:
    """Broken inputs are reported, not silently recovered."""

    def test_truncated_xml(self, tmp_path):
        path = tmp_path / "broken.xml"
        path.write_text("<Spec><ISA><Instructions><Instruction>", encoding="utf-8")
        with pytest.raises(MalformedSourceError) as excinfo:
            extract_document(path)
        assert excinfo.value.path == str(path)
        assert "not well-formed" in excinfo.value.cause

    def test_missing_file(self, tmp_path):
        with pytest.raises(MalformedSourceError) as excinfo:
            extract_document(tmp_path / "missing.xml")
        assert "cannot read" in excinfo.value.cause

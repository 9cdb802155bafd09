"""Builders for small AMD machine-readable ISA XML documents and archives used by the tests."""

import io
import zipfile
from xml.sax.saxutils import escape

import requests


def operand_xml(field, operand_type, data_format="FMT_NUM_F32", order=None, implicit=False,
                is_input=True, is_output=False):
    order_attr = f' Order="{order}"' if order is not None else ""
    return (
        f'<Operand Input="{str(is_input).lower()}" Output="{str(is_output).lower()}" '
        f'IsImplicit="{str(implicit).lower()}"{order_attr}>'
        f"<FieldName>{field}</FieldName>"
        f"<DataFormatName>{data_format}</DataFormatName>"
        f"<OperandType>{operand_type}</OperandType>"
        f"<OperandSize>32</OperandSize>"
        f"</Operand>"
    )


def instruction_xml(name, description, encodings, architectures=(), aliases=()):
    """
    encodings: list of (encoding_name, [operand_xml, ...])
    """
    parts = [f"<Instruction><InstructionName>{name}</InstructionName>"]
    if aliases:
        parts.append("<AliasedInstructionNames>")
        parts.extend(f"<InstructionName>{alias}</InstructionName>" for alias in aliases)
        parts.append("</AliasedInstructionNames>")
    for arch in architectures:
        parts.append(f"<ArchitectureName>{arch}</ArchitectureName>")
    parts.append(f"<Description>{escape(description)}</Description>")
    parts.append("<InstructionEncodings>")
    for encoding_name, operands in encodings:
        parts.append(f"<InstructionEncoding><EncodingName>{encoding_name}</EncodingName><Operands>")
        parts.extend(operands)
        parts.append("</Operands></InstructionEncoding>")
    parts.append("</InstructionEncodings></Instruction>")
    return "".join(parts)


def isa_document_xml(architecture, instructions=(), registers=()):
    """
    registers: list of (name, description or None)
    """
    values = []
    for name, description in registers:
        desc = f"<Description>{escape(description)}</Description>" if description is not None else ""
        values.append(f"<PredefinedValue><Name>{name}</Name>{desc}<Value>0</Value></PredefinedValue>")
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        "<Spec>"
        f"<Architecture><ArchitectureName>{architecture}</ArchitectureName></Architecture>"
        "<ISA><Instructions>"
        + "".join(instructions)
        + "</Instructions><OperandTypes><OperandType><OperandTypeName>OPR_SREG</OperandTypeName>"
        "<OperandPredefinedValues>"
        + "".join(values)
        + "</OperandPredefinedValues></OperandType></OperandTypes></ISA></Spec>\n"
    )


V_ADD_F32_OPERANDS = [
    operand_xml("vdst", "OPR_VGPR", order=1, is_input=False, is_output=True),
    operand_xml("src0", "OPR_SRC_VGPR_OR_INLINE", order=2),
    operand_xml("vsrc1", "OPR_VGPR", order=3),
]

V_ADD_F32_XML = instruction_xml(
    "V_ADD_F32",
    "Add two single-precision floats.",
    [
        ("ENC_VOP2", V_ADD_F32_OPERANDS),
        ("ENC_VOP3", V_ADD_F32_OPERANDS),
        ("VOP2_VOP_DPP16", V_ADD_F32_OPERANDS),
    ],
)

S_ENDPGM_XML = instruction_xml(
    "S_ENDPGM",
    "End of program; terminate wavefront.",
    [("ENC_SOPP", [operand_xml("simm16", "OPR_SIMM16", data_format="FMT_NUM_B16", order=1, implicit=True)])],
)

TTMP_REGISTERS = [(f"ttmp{i}", "Trap temporary register.") for i in range(16)]


def make_zip(members):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in members.items():
            archive.writestr(name, content)
    return buffer.getvalue()


class FakeResponse:
    def __init__(self, content, status_code=200):
        self.content = content
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

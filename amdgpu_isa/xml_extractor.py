"""
AMD Machine-Readable ISA XML Extractor

Extracts raw instruction records and special-register names from one vendor
ISA XML document at a time. No state is kept across documents; merging and
register compression happen later in the pipeline.

Based on the structure of the AMD machine-readable ISA files:

    <Spec>
      <Architecture><ArchitectureName>AMD RDNA 3</ArchitectureName></Architecture>
      <ISA>
        <Instructions>
          <Instruction>
            <InstructionName>V_ADD_F32</InstructionName>
            <Description>...</Description>
            <InstructionEncodings>
              <InstructionEncoding>
                <EncodingName>ENC_VOP2</EncodingName>
                <Operands>
                  <Operand Input="false" Output="true" IsImplicit="false" Order="1">
                    <FieldName>vdst</FieldName>
                    <DataFormatName>FMT_NUM_F32</DataFormatName>
                    <OperandType>OPR_VGPR</OperandType>
                    <OperandSize>32</OperandSize>
                  </Operand>
                  ...
        <OperandTypes>
          <OperandType>
            <OperandPredefinedValues>
              <PredefinedValue><Name>vcc_lo</Name><Description>...</Description><Value>106</Value></PredefinedValue>

Requirements: pip install beautifulsoup4 lxml
"""

from pathlib import Path
from typing import List, Optional, Union

from bs4 import BeautifulSoup, Tag
from lxml import etree

from .knowledge_base import InstructionRecord, SpecialRegister
from .operand_parser import InstructionEncoding, Operand, build_args


class MalformedSourceError(Exception):
    """A source document could not be read or is not well-formed XML."""

    def __init__(self, path: Union[str, Path], cause: str):
        self.path = str(path)
        self.cause = cause
        super().__init__(f"{path}: {cause}")


# ============================================================================
# Data Models
# ============================================================================

class ExtractedInstruction:
    """An instruction as found in one document, before classification and merging."""

    def __init__(self, name: str):
        self.name = name.strip()
        self.description: Optional[str] = None
        # Tags carried by the instruction element itself (multi-arch documents)
        self.architectures: List[str] = []
        self.encodings: List[InstructionEncoding] = []

    def to_record(self) -> InstructionRecord:
        """Classify operands and build the knowledge-base record."""
        args, arg_kinds, arg_data_kinds = build_args(self.encodings)
        return InstructionRecord(
            name=self.name,
            architectures=self.architectures,
            description=self.description,
            args=args,
            arg_kinds=arg_kinds,
            arg_data_kinds=arg_data_kinds,
            available_encodings=[enc.encoding_name for enc in self.encodings if enc.encoding_name],
        )

    def __repr__(self) -> str:
        return f"ExtractedInstruction({self.name}, {len(self.encodings)} encodings)"


class ExtractedDocument:
    """Everything extracted from a single XML document."""

    def __init__(self, path: Path, architecture_name: str):
        self.path = path
        self.architecture_name = architecture_name
        self.instructions: List[ExtractedInstruction] = []
        self.special_registers: List[SpecialRegister] = []

    def __repr__(self) -> str:
        return (
            f"ExtractedDocument({self.path.name}, {self.architecture_name!r}, "
            f"{len(self.instructions)} instructions, {len(self.special_registers)} registers)"
        )


# ============================================================================
# Field Parsing Utilities
# ============================================================================

def parse_bool(raw: Optional[str]) -> Optional[bool]:
    """Parse "true"/"false" (any case); anything else is unknown."""
    if raw is None:
        return None
    value = raw.strip().lower()
    if value == "true":
        return True
    if value == "false":
        return False
    return None


def parse_int(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None


def child_text(parent: Tag, name: str) -> Optional[str]:
    """Stripped text of the first direct child called `name`, if any."""
    child = parent.find(name, recursive=False)
    if child is None:
        return None
    return child.get_text().strip()


def parse_operand(element: Tag) -> Operand:
    """Build an Operand from an <Operand> element and its attributes."""
    return Operand(
        field_name=child_text(element, 'FieldName'),
        operand_type=child_text(element, 'OperandType'),
        data_format_name=child_text(element, 'DataFormatName'),
        size=parse_int(child_text(element, 'OperandSize')),
        is_input=parse_bool(element.get('Input')),
        is_output=parse_bool(element.get('Output')),
        is_implicit=parse_bool(element.get('IsImplicit')),
        order=parse_int(element.get('Order')),
    )


def parse_encoding(element: Tag) -> InstructionEncoding:
    """Build an InstructionEncoding from an <InstructionEncoding> element."""
    encoding = InstructionEncoding(child_text(element, 'EncodingName'))
    for operand_element in element.find_all('Operand'):
        encoding.operands.append(parse_operand(operand_element))
    return encoding


def parse_instruction(element: Tag) -> Optional[ExtractedInstruction]:
    """
    Parse a single <Instruction> element.

    The primary name is the direct <InstructionName> child; names listed under
    <AliasedInstructionNames> never replace it.

    Returns:
        ExtractedInstruction or None if the element carries no name
    """
    name = child_text(element, 'InstructionName')
    if not name:
        return None

    instr = ExtractedInstruction(name)
    instr.description = child_text(element, 'Description')

    for arch_element in element.find_all('ArchitectureName'):
        arch = arch_element.get_text().strip()
        if arch and arch not in instr.architectures:
            instr.architectures.append(arch)

    for encoding_element in element.find_all('InstructionEncoding'):
        instr.encodings.append(parse_encoding(encoding_element))

    return instr


def parse_special_registers(soup: BeautifulSoup) -> List[SpecialRegister]:
    """Collect <PredefinedValue> names and descriptions from operand-type tables."""
    registers = []
    for values in soup.find_all('OperandPredefinedValues'):
        for value in values.find_all('PredefinedValue'):
            name = child_text(value, 'Name')
            if not name:
                continue
            registers.append(SpecialRegister(name, child_text(value, 'Description')))
    return registers


def document_architecture(soup: BeautifulSoup) -> str:
    """First <ArchitectureName> outside any instruction, or an empty label."""
    for element in soup.find_all('ArchitectureName'):
        if element.find_parent('Instruction') is None:
            return element.get_text().strip()
    return ""


# ============================================================================
# Document Extraction
# ============================================================================

def read_document(path: Union[str, Path]) -> BeautifulSoup:
    """
    Read and parse an XML document.

    The lxml parser is used strictly first so that truncated or broken files
    are reported instead of being silently recovered.

    Raises:
        MalformedSourceError: If the file is unreadable or not well-formed
    """
    path = Path(path)
    try:
        content = path.read_bytes()
    except OSError as e:
        raise MalformedSourceError(path, f"cannot read file: {e}") from e

    try:
        etree.fromstring(content, parser=etree.XMLParser(resolve_entities=False, huge_tree=True))
    except etree.XMLSyntaxError as e:
        raise MalformedSourceError(path, f"not well-formed XML: {e}") from e

    return BeautifulSoup(content, 'xml')


def extract_document(path: Union[str, Path]) -> ExtractedDocument:
    """
    Extract instructions and special registers from one ISA XML document.

    Raises:
        MalformedSourceError: If the document cannot be parsed
    """
    path = Path(path)
    soup = read_document(path)

    document = ExtractedDocument(path, document_architecture(soup))

    for element in soup.find_all('Instruction'):
        instr = parse_instruction(element)
        if instr:
            document.instructions.append(instr)

    document.special_registers = parse_special_registers(soup)
    return document

#!/usr/bin/env python3
"""
AMDGPU ISA Knowledge Base Compiler

Compiles the AMD machine-readable ISA XML documents into one JSON knowledge
base used by the query engine.

Pipeline:
1. Collect *.xml documents from the input directories and files
2. Extract instructions (all documents) and special registers (RDNA documents)
3. Normalize architecture tags and merge identical instructions across documents
4. Filter, deduplicate and range-compress the special registers
5. Write data/isa.json plus a plain-text extraction report

Usage:
    amdgpu-isa-compile                          # amd_gpu_xmls/ -> data/isa.json
    amdgpu-isa-compile rdna3.xml rdna4.xml      # JSON to stdout
    amdgpu-isa-compile amd_gpu_xmls -o out/isa.json --report out/report.txt
    amdgpu-isa-compile --fetch-latest           # download documents first

Requirements: pip install beautifulsoup4 lxml requests
"""

import argparse
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, TextIO, Tuple

from .architecture import normalize_architecture_name
from .fetch import FetchError, fetch_isa_documents
from .knowledge_base import KnowledgeBase, write_knowledge_base
from .merge import InstructionMerger
from .special_registers import RegisterCollector, compress_special_registers
from .xml_extractor import ExtractedDocument, MalformedSourceError, extract_document


# ============================================================================
# Configuration
# ============================================================================

DEFAULT_INPUT_DIR = Path("amd_gpu_xmls")
DEFAULT_OUTPUT = Path("data") / "isa.json"

# Special registers are only harvested from documents whose file name contains this
REGISTER_SOURCE_PATTERN = "rdna"

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_NO_INPUT = 2


# ============================================================================
# Statistics
# ============================================================================

class ExtractionStats:
    """Tracks extraction statistics."""

    def __init__(self):
        self.documents: List[str] = []
        self.by_architecture: Dict[str, int] = {}
        self.total_instructions = 0
        self.merged_instructions = 0
        self.unique_instructions = 0
        self.register_sources: List[str] = []
        self.registers_collected = 0
        self.registers_ignored = 0
        self.register_singles = 0
        self.register_ranges: List[str] = []

    def add_document(self, document: ExtractedDocument) -> None:
        """Record document statistics."""
        arch = normalize_architecture_name(document.architecture_name) or "<unnamed>"
        self.documents.append(document.path.name)
        self.by_architecture[arch] = self.by_architecture.get(arch, 0) + len(document.instructions)
        self.total_instructions += len(document.instructions)


# ============================================================================
# Pipeline
# ============================================================================

def collect_xml_files(inputs: List[Path]) -> List[Path]:
    """
    Expand inputs into XML document paths.

    Directories contribute their *.xml files (non-recursive, sorted by name);
    other paths are taken as given.
    """
    xml_files = []
    for input_path in inputs:
        if input_path.is_dir():
            xml_files.extend(sorted(
                path for path in input_path.iterdir()
                if path.is_file() and path.suffix == ".xml"
            ))
        else:
            xml_files.append(input_path)
    return xml_files


def is_register_source(path: Path, pattern: str = REGISTER_SOURCE_PATTERN) -> bool:
    return pattern in path.name


def compile_knowledge_base(
    xml_files: List[Path],
    stats: Optional[ExtractionStats] = None,
    register_pattern: str = REGISTER_SOURCE_PATTERN,
    out: Optional[TextIO] = None,
) -> KnowledgeBase:
    """
    Run the extraction pipeline over a list of XML documents.

    Args:
        xml_files: Documents in processing order (the order fixes record order)
        stats: Optional statistics collector
        register_pattern: File-name substring selecting register sources
        out: Stream for progress output

    Raises:
        MalformedSourceError: If any document is unreadable or not well-formed
    """
    stats = stats or ExtractionStats()
    out = out or sys.stdout
    merger = InstructionMerger()
    collector = RegisterCollector()

    print("\n" + "=" * 70, file=out)
    print("EXTRACTING INSTRUCTIONS AND REGISTERS", file=out)
    print("=" * 70, file=out)

    for path in xml_files:
        document = extract_document(path)
        stats.add_document(document)

        records = [instr.to_record() for instr in document.instructions]
        merger.add_document(document.architecture_name, records)

        line = f"  ✓ {path.name}: {document.architecture_name or '<no architecture>'} ({len(records)} instructions"
        if is_register_source(path, register_pattern):
            collector.extend(document.special_registers)
            stats.register_sources.append(path.name)
            line += f", {len(document.special_registers)} register names"
        print(line + ")", file=out)

    stats.merged_instructions = merger.merged_count
    stats.unique_instructions = len(merger.instructions)
    stats.registers_collected = len(collector)
    stats.registers_ignored = collector.ignored_count

    print("\n" + "=" * 70, file=out)
    print("COMPRESSING SPECIAL REGISTERS", file=out)
    print("=" * 70, file=out)

    if not stats.register_sources:
        print(f"⚠ No document name contains '{register_pattern}'; register table is empty", file=out)

    registers = compress_special_registers(collector.registers())
    stats.register_singles = len(registers.singles)
    stats.register_ranges = [
        f"{rng.prefix}{rng.start}..{rng.prefix}{rng.start + rng.count - 1}" for rng in registers.ranges
    ]

    print(f"✓ {stats.registers_collected} registers kept ({stats.registers_ignored} ignored)", file=out)
    print(f"✓ {stats.register_singles} singles, {len(registers.ranges)} ranges", file=out)
    print(f"✓ {stats.unique_instructions} instructions after merging "
          f"({stats.merged_instructions} duplicates folded)", file=out)

    return KnowledgeBase(merger.instructions, registers)


def generate_report(stats: ExtractionStats, knowledge_base: KnowledgeBase) -> str:
    """Generate comprehensive extraction report."""
    lines = []
    lines.append("=" * 70)
    lines.append("AMDGPU ISA EXTRACTION REPORT")
    lines.append("=" * 70)
    lines.append(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    lines.append("")

    lines.append("OVERALL STATISTICS")
    lines.append("-" * 70)
    lines.append(f"Documents processed: {len(stats.documents)}")
    lines.append(f"Instructions extracted: {stats.total_instructions}")
    lines.append(f"Duplicates merged: {stats.merged_instructions}")
    lines.append(f"Instruction records written: {len(knowledge_base.instructions)}")
    lines.append(f"Unique names: {len(set(instr.name.lower() for instr in knowledge_base.instructions))}")
    lines.append("")

    lines.append("\nINSTRUCTIONS BY ARCHITECTURE")
    lines.append("-" * 70)
    for arch in sorted(stats.by_architecture):
        lines.append(f"{arch:12s}: {stats.by_architecture[arch]} extracted")

    shared: Dict[Tuple[str, ...], int] = {}
    for instr in knowledge_base.instructions:
        key = tuple(instr.architectures)
        shared[key] = shared.get(key, 0) + 1
    lines.append("\nRecords by architecture set:")
    for key in sorted(shared, key=lambda k: (-shared[k], k)):
        lines.append(f"  {', '.join(key) or '<none>'}: {shared[key]}")
    lines.append("")

    lines.append("\nSPECIAL REGISTERS")
    lines.append("-" * 70)
    lines.append(f"Sources: {', '.join(stats.register_sources) or '<none>'}")
    lines.append(f"Registers kept: {stats.registers_collected}")
    lines.append(f"Ignored (plain v/s registers, numeric literals): {stats.registers_ignored}")
    lines.append(f"Singles written: {stats.register_singles}")
    lines.append(f"Ranges written: {len(stats.register_ranges)}")
    for i in range(0, len(stats.register_ranges), 6):
        chunk = stats.register_ranges[i:i+6]
        lines.append(f"  {', '.join(chunk)}")

    lines.append("")
    lines.append("=" * 70)
    lines.append("END REPORT")
    lines.append("=" * 70)

    return '\n'.join(lines)


def default_report_path(output_path: Path) -> Path:
    return output_path.with_name(f"{output_path.stem}_report.txt")


# ============================================================================
# Main Pipeline
# ============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    """Main compilation pipeline; returns the process exit code."""
    parser = argparse.ArgumentParser(
        description='Compile AMD machine-readable ISA XML documents into an ISA knowledge base',
    )
    parser.add_argument('inputs', nargs='*', type=Path,
                        help=f'XML files or directories (default: {DEFAULT_INPUT_DIR})')
    parser.add_argument('-o', '--output', type=Path,
                        help='Output JSON path (default: stdout, or '
                             f'{DEFAULT_OUTPUT} when no inputs are given)')
    parser.add_argument('--report', type=Path,
                        help='Extraction report path (default: next to the output)')
    parser.add_argument('--register-pattern', default=REGISTER_SOURCE_PATTERN,
                        help='File-name substring selecting special-register sources')
    parser.add_argument('--fetch-latest', action='store_true',
                        help=f'Download the latest ISA documents into {DEFAULT_INPUT_DIR} first')
    args = parser.parse_args(argv)

    inputs: List[Path] = args.inputs
    output: Optional[Path] = args.output
    if not inputs:
        output = output or DEFAULT_OUTPUT

    # Keep stdout clean for the JSON document
    out = sys.stdout if output is not None else sys.stderr

    print("=" * 70, file=out)
    print("AMDGPU ISA KNOWLEDGE BASE COMPILER", file=out)
    print("=" * 70, file=out)

    if args.fetch_latest:
        try:
            fetch_isa_documents(DEFAULT_INPUT_DIR, out=out)
        except FetchError as e:
            print(f"✗ {e}", file=sys.stderr)
            return EXIT_FAILURE

    if not inputs and DEFAULT_INPUT_DIR.is_dir():
        inputs = [DEFAULT_INPUT_DIR]

    xml_files = collect_xml_files(inputs)
    if not xml_files:
        print("✗ No XML files found. Usage: amdgpu-isa-compile <xml...> [-o output.json]", file=sys.stderr)
        return EXIT_NO_INPUT

    print(f"Found {len(xml_files)} XML documents", file=out)

    stats = ExtractionStats()
    try:
        knowledge_base = compile_knowledge_base(xml_files, stats, args.register_pattern, out)
    except MalformedSourceError as e:
        print(f"✗ Malformed source document {e}", file=sys.stderr)
        print("✗ Nothing was written.", file=sys.stderr)
        return EXIT_FAILURE

    print("\n" + "=" * 70, file=out)
    print("GENERATING OUTPUTS", file=out)
    print("=" * 70, file=out)

    if output is None:
        sys.stdout.write(knowledge_base.to_json())
    else:
        try:
            write_knowledge_base(knowledge_base, output)
        except OSError as e:
            print(f"✗ Failed to write {output}: {e}", file=sys.stderr)
            return EXIT_FAILURE
        print(f"✓ Wrote {len(knowledge_base.instructions)} instructions to {output}", file=out)

    report_path = args.report or (default_report_path(output) if output is not None else None)
    if report_path is not None:
        report_path.parent.mkdir(parents=True, exist_ok=True)
        with open(report_path, 'w', encoding='utf-8') as f:
            f.write(generate_report(stats, knowledge_base))
        print(f"✓ Wrote report to {report_path}", file=out)

    print("\n" + "=" * 70, file=out)
    print("COMPILATION COMPLETE", file=out)
    print("=" * 70, file=out)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())

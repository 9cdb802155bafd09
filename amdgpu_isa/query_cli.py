#!/usr/bin/env python3
"""
ISA Knowledge Base Query Tool

Answers the same questions the editor layer asks, from the command line.

Usage:
    amdgpu-isa-query v_add_f32_e32 --arch rdna3
    amdgpu-isa-query v_add_f32_e32 --language-id rdna4
    amdgpu-isa-query exec_lo
    amdgpu-isa-query v_add --complete
    amdgpu-isa-query --signature "v_add_f32 v0, " --column 14
"""

import argparse
import logging
import sys
from typing import List, Optional

from .architecture import architecture_filter
from .formatting import describe_token, format_architectures, hover_for_token, signature_for_line
from .query import QueryEngine, QueryStatus


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description='Query a compiled AMDGPU ISA knowledge base')
    parser.add_argument('token', nargs='?', help='Instruction mnemonic or special register name')
    parser.add_argument('--data', help='Knowledge base path (default: $AMDGPU_LSP_DATA or data/isa.json)')
    parser.add_argument('--language-id', default='', help='Editor language id (rdna3, rdna35, cdna4, ...)')
    parser.add_argument('--arch', help='Architecture override (wins over --language-id)')
    parser.add_argument('--complete', action='store_true', help='List completions for TOKEN as a prefix')
    parser.add_argument('--signature', metavar='LINE', help='Show signature help for an assembly line')
    parser.add_argument('--column', type=int, help='Cursor column for --signature (default: end of line)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s - %(name)s - %(message)s',
    )

    engine = QueryEngine.load(args.data)
    print(engine.status_message(), file=sys.stderr)
    if not engine.load_info.ok:
        return 1

    arch = architecture_filter(args.language_id, args.arch)

    if args.signature is not None:
        column = args.column if args.column is not None else len(args.signature)
        signature = signature_for_line(engine, args.signature, column, arch)
        if signature is None:
            print("✗ No signature")
            return 1
        print(signature.label)
        for index, (start, end, doc) in enumerate(signature.parameters):
            marker = "→" if index == signature.active_parameter else " "
            print(f" {marker} {signature.label[start:end]}: {doc or ''}")
        return 0

    if not args.token:
        parser.error("a token is required unless --signature is given")

    if args.complete:
        for label in engine.complete(args.token, arch):
            print(label)
        return 0

    hover = hover_for_token(engine, args.token, arch)
    if hover is None:
        result = engine.resolve(args.token, arch)
        if result.status is QueryStatus.FILTERED_OUT:
            print(f"✗ {describe_token(args.token)} is not available for {arch}")
        else:
            print(f"✗ No entry for {describe_token(args.token)}")
        return 1

    print(hover)
    if engine.lookup_register(args.token) is not None:
        return 0
    result = engine.resolve(args.token, arch)
    if result.found:
        print()
        print(f"Architectures: {format_architectures(result.record.architectures)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

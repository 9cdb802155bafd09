#!/usr/bin/env python3
"""
AMD Machine-Readable ISA Downloader

Downloads the vendor's machine-readable ISA archive and unpacks the XML
documents into the compiler's default input directory.

Usage:
    amdgpu-isa-fetch
    amdgpu-isa-fetch --output-dir amd_gpu_xmls --url <archive url>

Requirements: pip install requests
"""

import argparse
import io
import sys
import zipfile
from pathlib import Path
from typing import List, Optional, TextIO

import requests


# ============================================================================
# Configuration
# ============================================================================

ISA_ARCHIVE_URL = "https://gpuopen.com/download/machine-readable-isa/latest/"
DEFAULT_OUTPUT_DIR = Path("amd_gpu_xmls")
REQUEST_TIMEOUT = 120


class FetchError(Exception):
    """The ISA archive could not be downloaded or unpacked."""


def download_archive(
    url: str = ISA_ARCHIVE_URL,
    timeout: int = REQUEST_TIMEOUT,
    out: Optional[TextIO] = None,
) -> bytes:
    """
    Download the ISA archive.

    Raises:
        FetchError: On network errors or non-success HTTP status
    """
    out = out or sys.stdout
    print(f"Fetching {url}...", file=out)
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise FetchError(f"failed to fetch {url}: {e}") from e

    print(f"✓ Downloaded {len(response.content):,} bytes", file=out)
    return response.content


def unpack_archive(content: bytes, output_dir: Path) -> List[Path]:
    """
    Extract every member of a zip archive into output_dir, overwriting.

    Returns:
        Paths of the extracted .xml files
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    try:
        with zipfile.ZipFile(io.BytesIO(content)) as archive:
            archive.extractall(output_dir)
            names = archive.namelist()
    except zipfile.BadZipFile as e:
        raise FetchError(f"downloaded archive is not a zip file: {e}") from e

    return sorted(output_dir / name for name in names if name.lower().endswith(".xml"))


def fetch_isa_documents(
    output_dir: Path = DEFAULT_OUTPUT_DIR,
    url: str = ISA_ARCHIVE_URL,
    out: Optional[TextIO] = None,
) -> List[Path]:
    """Download and unpack the ISA documents; returns the extracted XML paths."""
    out = out or sys.stdout
    content = download_archive(url, out=out)
    xml_files = unpack_archive(content, output_dir)
    print(f"✓ Unpacked {len(xml_files)} XML documents to {output_dir}", file=out)
    return xml_files


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description='Download the AMD machine-readable ISA XML documents')
    parser.add_argument('--output-dir', type=Path, default=DEFAULT_OUTPUT_DIR,
                        help=f'Directory to unpack into (default: {DEFAULT_OUTPUT_DIR})')
    parser.add_argument('--url', default=ISA_ARCHIVE_URL, help='Archive URL')
    args = parser.parse_args(argv)

    print("=" * 70)
    print("AMD MACHINE-READABLE ISA DOWNLOAD")
    print("=" * 70)

    try:
        fetch_isa_documents(args.output_dir, args.url)
    except FetchError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1

    print(f"downloaded amdgpu ISA files to {args.output_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

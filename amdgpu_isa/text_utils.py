"""
Text position helpers for editor requests.

Editor positions count columns in UTF-16 code units; Python strings index by
code point. These helpers convert between the two and pick out the word,
word prefix or label under a cursor.
"""

import re
from typing import List, Optional, Tuple

LINE_BREAK = re.compile(r"\r\n|\r|\n")


def utf16_to_index(line: str, character: int) -> int:
    """Convert a UTF-16 column to a string index (clamped to the line end)."""
    units = 0
    for index, ch in enumerate(line):
        if units >= character:
            return index
        units += 2 if ord(ch) > 0xFFFF else 1
    return len(line)


def index_to_utf16(line: str, index: int) -> int:
    """Convert a string index to a UTF-16 column."""
    return sum(2 if ord(ch) > 0xFFFF else 1 for ch in line[:index])


def split_lines(text: str) -> List[str]:
    """Split on \\n, \\r\\n and \\r only; form feeds and other separators stay in the line."""
    return LINE_BREAK.split(text)


def get_line(text: str, line_number: int) -> Optional[str]:
    lines = split_lines(text)
    if 0 <= line_number < len(lines):
        return lines[line_number]
    return None


def is_word_char(ch: str) -> bool:
    return ch.isascii() and (ch.isalnum() or ch == '_')


def is_label_start(ch: str) -> bool:
    return ch.isascii() and (ch.isalpha() or ch in '_.$')


def is_label_char(ch: str) -> bool:
    return is_label_start(ch) or (ch.isascii() and ch.isdigit())


def word_at_position(text: str, line_number: int, character: int) -> Optional[str]:
    """Whole word (letters, digits, underscore) touching the cursor."""
    line = get_line(text, line_number)
    if line is None:
        return None
    cursor = utf16_to_index(line, character)

    start = cursor
    while start > 0 and is_word_char(line[start - 1]):
        start -= 1
    end = cursor
    while end < len(line) and is_word_char(line[end]):
        end += 1

    if start == end:
        return None
    return line[start:end]


def word_prefix_at_position(text: str, line_number: int, character: int) -> Optional[Tuple[str, int]]:
    """
    Part of the word before the cursor.

    Returns:
        (prefix, start_index) or None when the cursor does not follow a word
    """
    line = get_line(text, line_number)
    if line is None:
        return None
    cursor = utf16_to_index(line, character)

    start = cursor
    while start > 0 and is_word_char(line[start - 1]):
        start -= 1

    if start == cursor:
        return None
    return (line[start:cursor], start)


def in_comment(line: str, index: int) -> bool:
    """Assembly comments run from ';' to the end of the line."""
    comment_start = line.find(';')
    return comment_start != -1 and index >= comment_start


def leading_mnemonic(line: str) -> str:
    """First token of a line, up to whitespace or a comma."""
    stripped = line.lstrip()
    end = 0
    while end < len(stripped) and not stripped[end].isspace() and stripped[end] != ',':
        end += 1
    return stripped[:end]


def label_at_position(line: str, character: int) -> Optional[Tuple[str, int]]:
    """Label-like identifier (letters, digits, '_', '.', '$') under the cursor."""
    cursor = utf16_to_index(line, character)

    start = cursor
    while start > 0 and is_label_char(line[start - 1]):
        start -= 1
    end = cursor
    while end < len(line) and is_label_char(line[end]):
        end += 1

    if start == end or not is_label_start(line[start]):
        return None
    return (line[start:end], start)


def find_label_definition(text: str, label: str) -> Optional[Tuple[int, int, int]]:
    """
    Find the line defining `label:`.

    Returns:
        (line_number, start_index, end_index) of the label name, or None
    """
    for line_number, line in enumerate(split_lines(text)):
        code = line.split(';', 1)[0]
        stripped = code.lstrip()
        if not stripped:
            continue

        colon = stripped.find(':')
        if colon == -1:
            continue

        name = stripped[:colon].rstrip()
        if not name or name != label:
            continue
        if not is_label_start(name[0]) or not all(is_label_char(ch) for ch in name):
            continue

        start = len(code) - len(stripped)
        return (line_number, start, start + len(name))
    return None

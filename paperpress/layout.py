"""
Line layout for the fixed-pitch receipt.

A document is laid out completely into an ordered list of chunks before
the printer is touched, so a word that can never fit fails the request
without printing anything. Chunks are then written in order while the
printer lock is held.
"""

import re
from dataclasses import dataclass
from typing import Iterable, List

from paperpress.config import PRINTER_WIDTH
from paperpress.errors import OversizedTokenError

# Vertical tab and non-ASCII spaces are part of a word
_ASCII_WHITESPACE = re.compile(r"[ \t\n\f\r]+")

WRAP = "wrap"
RAW = "raw"
CENTER = "center"


@dataclass(frozen=True)
class Block:
    """A section of a composed document and how to lay it out."""

    text: str
    mode: str = WRAP


def split_lines(text: str) -> List[str]:
    """Splits on newlines; a trailing newline does not open an extra line."""
    if not text:
        return [""]
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def split_units(line: str) -> List[str]:
    return [unit for unit in _ASCII_WHITESPACE.split(line) if unit]


def unit_width(unit: str) -> int:
    """Printed width of a word: its UTF-8 byte length."""
    return len(unit.encode("utf-8"))


def wrap_line(line: str, width: int = PRINTER_WIDTH) -> List[str]:
    """
    Greedy first-fit wrap of one input line.

    Words are packed onto the current output line until the next one no
    longer fits, then a line break is emitted and that word starts the new
    line. The line always ends with a newline chunk, so an empty input
    line still prints a blank line.
    """
    chunks = []
    chars_written = 0
    pending_separator = 0

    for unit in split_units(line):
        size = unit_width(unit)
        if size > width:
            raise OversizedTokenError(unit, width)

        if chars_written + size + pending_separator > width:
            chunks.append("\n")
            chars_written = 0
            pending_separator = 0

        if pending_separator:
            chunks.append(" ")

        chunks.append(unit)

        chars_written += pending_separator + size
        pending_separator = 1

    chunks.append("\n")
    return chunks


def center_line(text: str, width: int = PRINTER_WIDTH) -> str:
    """Pads text symmetrically to the full width; odd spare goes right."""
    if len(text) > width:
        raise OversizedTokenError(text, width)
    spare = width - len(text)
    left = spare // 2
    return " " * left + text + " " * (spare - left)


def layout_text(text: str, raw: bool = False, width: int = PRINTER_WIDTH) -> List[str]:
    """
    Lays out a plain-text document.

    Raw mode writes every line verbatim for callers that already formatted
    their content; wrapped mode word-wraps each line to the width.
    """
    chunks = []
    for line in split_lines(text):
        if raw:
            if line:
                chunks.append(line)
            chunks.append("\n")
        else:
            chunks.extend(wrap_line(line, width))
    return chunks


def layout_blocks(blocks: Iterable[Block], width: int = PRINTER_WIDTH) -> List[str]:
    """Lays out a composed document block by block."""
    chunks = []
    for block in blocks:
        if block.mode == CENTER:
            for line in split_lines(block.text):
                chunks.extend([center_line(line.strip(" \t\n\f\r"), width), "\n"])
        elif block.mode == RAW:
            chunks.extend(layout_text(block.text, raw=True, width=width))
        elif block.mode == WRAP:
            chunks.extend(layout_text(block.text, width=width))
        else:
            raise ValueError(f"Unknown block mode: {block.mode}")
    return chunks


def emit(printer, chunks: Iterable[str]):
    """Writes chunks to the printer in order."""
    for chunk in chunks:
        printer.write_chunk(chunk)


def print_document(printer, chunks: List[str], lock):
    """Prints one whole document while holding the printer lock."""
    with lock:
        printer.begin()
        emit(printer, chunks)
        printer.finish()

"""
HexInspect Package
==================

A read-only hex viewer with a data inspector and optional AI summaries.

The core is two pure pieces that the Qt front end drives:

Key Features:
-------------
- Multi-format decoding of the bytes at a cursor offset: 8/16/24/32/64-bit
  integers, float32/float64, ULEB128/LEB128, MS-DOS, OLE, Unix and Mac HFS
  timestamps, a UTF-8 preview and the bits of the current byte
- Little/big endian toggle for every multi-byte interpretation
- Virtualized hex view: only the rows inside the viewport (plus a small
  overscan) are ever built, so multi-megabyte files scroll smoothly
- Debounced decoding while the cursor moves
- Per-file and cross-file AI analysis through Gemini or OpenAI

Architecture:
-------------
1. file_loader reads files into immutable byte buffers
2. session keeps application state as a state machine (reduce + SessionStore)
3. coordinator owns the cursor offset and feeds interpreter results to the
   data inspector panel
4. hex_view computes the visible rows; hex_widget paints them
5. analysis runs AI requests on worker threads, one per file at a time

Modules:
--------
- interpreter: interpret(data, offset, endianness) -> InterpretationResult
- hex_view: HexViewModel, visible_row_range, build_row
- main_window: HexInspectorWindow and the ``hexinspect`` entry point
"""

from .hex_view import HexViewModel, build_row, visible_row_range
from .interpreter import (BIG, LITTLE, InterpretationResult, decode_leb128, encode_sleb128,
                          encode_uleb128, interpret)

__version__ = "0.1.0"

__all__ = [
    'BIG',
    'LITTLE',
    'HexViewModel',
    'InterpretationResult',
    'build_row',
    'decode_leb128',
    'encode_sleb128',
    'encode_uleb128',
    'interpret',
    'visible_row_range',
]

"""
Nibble, incremental parsing

Unlicense (CC0, Public Domain), 2025

This is a library for composing small parsing functions into larger ones over text or bytes.
Every parse reports whether it completed, failed, or needs more input, which lets a stateful
consumer be fed chunk by chunk from a file or memory producer, seeking back and forth as needed.
"""

__all__ = [
    "abstract",
    "character",
    "number",
    "parser",
    "producer",
    "consumer",
]

from . import abstract
from . import character
from . import number
from . import parser
from . import producer
from . import consumer

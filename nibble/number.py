"""
Numeric literal parsers.

Text numbers are read from runs of ASCII digits; binary numbers are fixed-width
slices unpacked with `struct`, so a short slice asks for the full width.
"""

import struct

from .abstract import Parser
from .character import digit1, one_of, take
from .parser import map_, map_res, opt, pair, recognize

decimal: Parser = map_res(digit1, int)

signed_decimal: Parser = map_res(recognize(pair(opt(one_of("+-")), digit1)), int)

def _unpack(fmt: str) -> Parser:
    codec = struct.Struct(fmt)
    return map_(take(codec.size), lambda data: codec.unpack(data)[0])

be_u8 = _unpack(">B")
be_u16 = _unpack(">H")
be_u32 = _unpack(">I")
be_u64 = _unpack(">Q")
be_i8 = _unpack(">b")
be_i16 = _unpack(">h")
be_i32 = _unpack(">i")
be_i64 = _unpack(">q")
be_f32 = _unpack(">f")
be_f64 = _unpack(">d")

le_u8 = _unpack("<B")
le_u16 = _unpack("<H")
le_u32 = _unpack("<I")
le_u64 = _unpack("<Q")
le_i8 = _unpack("<b")
le_i16 = _unpack("<h")
le_i32 = _unpack("<i")
le_i64 = _unpack("<q")
le_f32 = _unpack("<f")
le_f64 = _unpack("<d")

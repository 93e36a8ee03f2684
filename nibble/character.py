from typing import Callable, Union

from .abstract import (
    Complete,
    ErrorCode,
    Incomplete,
    Needed,
    ParseOutcome,
    Parser,
    fail,
    need,
)

Chars = Union[str, bytes]

def _element(input: Chars, index: int) -> str:
    item = input[index]
    return chr(item) if isinstance(item, int) else item

def _as_text(chars: Chars) -> str:
    if isinstance(chars, (bytes, bytearray)):
        return chars.decode('latin-1')
    return chars

def _coerce(literal: Chars, input: Chars) -> Chars:
    """Bring a literal to the same type as the input it is matched against."""
    if isinstance(input, (bytes, bytearray)) and isinstance(literal, str):
        return literal.encode('latin-1')
    if isinstance(input, str) and isinstance(literal, (bytes, bytearray)):
        return literal.decode('latin-1')
    return literal

def satisfy(predicate: Callable[[str], bool], code: int) -> Parser:
    """
    Matches one element for which `predicate` holds, failing with `code` otherwise.
    """
    def _satisfy(input: Chars) -> ParseOutcome:
        if not input:
            return need(1)
        head = _element(input, 0)
        if predicate(head):
            return Complete(input[1:], head)
        return fail(code, input)
    return _satisfy

def one_of(chars: Chars) -> Parser:
    """
    Matches one of the provided characters.
    """
    allowed = frozenset(_as_text(chars))
    return satisfy(lambda c: c in allowed, ErrorCode.ONE_OF)

def none_of(chars: Chars) -> Parser:
    """
    Matches anything but the provided characters.
    """
    rejected = frozenset(_as_text(chars))
    return satisfy(lambda c: c not in rejected, ErrorCode.NONE_OF)

def char(c: Chars) -> Parser:
    """
    Matches exactly one given character.
    """
    expected = _as_text(c)
    if len(expected) != 1:
        raise ValueError(f"char expects a single character, got {expected!r}")
    return satisfy(lambda x: x == expected, ErrorCode.CHAR)

def _is_hex(c: str) -> bool:
    return c in "0123456789abcdefABCDEF"

def _is_space(c: str) -> bool:
    return c == " " or c == "\t"

def _is_multispace(c: str) -> bool:
    return c in " \t\r\n"

def _is_alpha(c: str) -> bool:
    return c.isascii() and c.isalpha()

def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"

def _is_alphanumeric(c: str) -> bool:
    return _is_alpha(c) or _is_digit(c)

alpha = satisfy(_is_alpha, ErrorCode.ALPHA)
digit = satisfy(_is_digit, ErrorCode.DIGIT)
hex_digit = satisfy(_is_hex, ErrorCode.HEX_DIGIT)
alphanumeric = satisfy(_is_alphanumeric, ErrorCode.ALPHANUMERIC)
space = satisfy(_is_space, ErrorCode.SPACE)

def anychar(input: Chars) -> ParseOutcome:
    if not input:
        return need(1)
    return Complete(input[1:], _element(input, 0))

def tag(literal: Chars) -> Parser:
    """
    Matches a fixed literal prefix.

    Input that is a proper prefix of the literal asks for the literal's full
    length; input that already differs fails.
    """
    if not literal:
        raise ValueError("tag literal must not be empty")

    def _tag(input: Chars) -> ParseOutcome:
        expected = _coerce(literal, input)
        available = min(len(input), len(expected))
        if input[:available] != expected[:available]:
            return fail(ErrorCode.TAG, input)
        if available < len(expected):
            return need(len(expected))
        return Complete(input[available:], input[:available])
    return _tag

def take(count: int) -> Parser:
    """
    Takes exactly `count` elements.
    """
    if count < 0:
        raise ValueError(f"take count must not be negative, got {count}")

    def _take(input: Chars) -> ParseOutcome:
        if len(input) < count:
            return need(count)
        return Complete(input[count:], input[:count])
    return _take

def _span(input: Chars, predicate: Callable[[str], bool]) -> int:
    index = 0
    while index < len(input) and predicate(_element(input, index)):
        index += 1
    return index

def take_while(predicate: Callable[[str], bool]) -> Parser:
    def _take_while(input: Chars) -> ParseOutcome:
        index = _span(input, predicate)
        return Complete(input[index:], input[:index])
    return _take_while

def take_while1(predicate: Callable[[str], bool], code: int = ErrorCode.TAKE_WHILE1) -> Parser:
    """
    Like `take_while`, but at least one element has to match.
    """
    def _take_while1(input: Chars) -> ParseOutcome:
        if not input:
            return need(1)
        index = _span(input, predicate)
        if index == 0:
            return fail(code, input)
        return Complete(input[index:], input[:index])
    return _take_while1

def take_till(predicate: Callable[[str], bool]) -> Parser:
    return take_while(lambda c: not predicate(c))

def take_until(literal: Chars) -> Parser:
    """
    Takes everything up to (not including) the first occurrence of `literal`.
    """
    if not literal:
        raise ValueError("take_until literal must not be empty")

    def _take_until(input: Chars) -> ParseOutcome:
        expected = _coerce(literal, input)
        index = input.find(expected)
        if index < 0:
            return Incomplete(Needed.UNKNOWN)
        return Complete(input[index:], input[:index])
    return _take_until

alpha1 = take_while1(_is_alpha, ErrorCode.ALPHA)
digit1 = take_while1(_is_digit, ErrorCode.DIGIT)
hex_digit1 = take_while1(_is_hex, ErrorCode.HEX_DIGIT)
alphanumeric1 = take_while1(_is_alphanumeric, ErrorCode.ALPHANUMERIC)
space0 = take_while(_is_space)
space1 = take_while1(_is_space, ErrorCode.SPACE)
multispace0 = take_while(_is_multispace)
multispace1 = take_while1(_is_multispace, ErrorCode.MULTISPACE)

newline = char("\n")
tab = char("\t")

def crlf(input: Chars) -> ParseOutcome:
    if len(input) < 2:
        return need(2)
    if _element(input, 0) == "\r" and _element(input, 1) == "\n":
        return Complete(input[2:], "\n")
    return fail(ErrorCode.CRLF, input)

def eol(input: Chars) -> ParseOutcome:
    """
    Either CR-LF or a lone LF, CR-LF tried first.

    A single element of input is not enough to rule CR-LF out, so it asks for two.
    """
    outcome = crlf(input)
    if outcome.is_complete():
        return outcome
    if outcome.is_failed() or (input and _element(input, 0) == "\n"):
        return newline(input)
    return outcome

line_ending = eol

not_line_ending = take_till(lambda c: c == "\r" or c == "\n")

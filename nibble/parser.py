from typing import Any, Callable, Dict, List, Tuple, Type, Union

from .abstract import (
    Complete,
    ErrorCode,
    Failed,
    Incomplete,
    ParseError,
    ParseOutcome,
    Parser,
    fail,
)

Step = Union[Parser, Tuple[str, Parser]]

def _consumed(before: Any, after: Any) -> int:
    return len(before) - len(after)

def alt(*parsers: Parser) -> Parser:
    """
    Tries each parser in order and keeps the first one that does not fail.

    An Incomplete from an earlier branch wins over later branches: the input
    may still turn into a match for it once more data arrives.
    """
    if not parsers:
        raise ValueError("alt needs at least one parser")

    def _alt(input: Any) -> ParseOutcome:
        for parser in parsers:
            outcome = parser(input)
            if not outcome.is_failed():
                return outcome
        return fail(ErrorCode.ALT, input)
    return _alt

def sequence(*parsers: Parser) -> Parser:
    """
    Runs parsers one after another, returning the tuple of their values.
    """
    def _sequence(input: Any) -> ParseOutcome:
        values: List[Any] = []
        rest = input
        for parser in parsers:
            outcome = parser(rest)
            if not outcome.is_complete():
                return outcome
            values.append(outcome.value)
            rest = outcome.remainder
        return Complete(rest, tuple(values))
    return _sequence

def chain(*steps: Step, build: Callable[..., Any]) -> Parser:
    """
    Runs `steps` in order and hands the bound values to `build`.

    Each step is either a parser, whose value is dropped, or a `(name, parser)`
    pair, whose value is passed to `build` as keyword argument `name`.
    """
    plan: List[Tuple[Any, Parser]] = []
    for step in steps:
        if isinstance(step, tuple):
            plan.append((step[0], step[1]))
        else:
            plan.append((None, step))

    def _chain(input: Any) -> ParseOutcome:
        bound: Dict[str, Any] = {}
        rest = input
        for name, parser in plan:
            outcome = parser(rest)
            if not outcome.is_complete():
                return outcome
            if name is not None:
                bound[name] = outcome.value
            rest = outcome.remainder
        return Complete(rest, build(**bound))
    return _chain

def pair(first: Parser, second: Parser) -> Parser:
    return sequence(first, second)

def preceded(prefix: Parser, parser: Parser) -> Parser:
    return map_(sequence(prefix, parser), lambda values: values[1])

def terminated(parser: Parser, suffix: Parser) -> Parser:
    return map_(sequence(parser, suffix), lambda values: values[0])

def delimited(left: Parser, parser: Parser, right: Parser) -> Parser:
    return map_(sequence(left, parser, right), lambda values: values[1])

def separated_pair(first: Parser, separator: Parser, second: Parser) -> Parser:
    return map_(sequence(first, separator, second), lambda values: (values[0], values[2]))

def _repeat(parser: Parser, input: Any, values: List[Any]) -> ParseOutcome:
    rest = input
    while True:
        outcome = parser(rest)
        if outcome.is_incomplete() and rest:
            # a partial item: the caller has to supply more input
            return outcome
        if not outcome.is_complete():
            return Complete(rest, values)
        if _consumed(rest, outcome.remainder) == 0:
            return Complete(rest, values)
        values.append(outcome.value)
        rest = outcome.remainder

def many0(parser: Parser) -> Parser:
    """
    Applies `parser` until it fails.

    A success that consumes nothing ends the repetition, and so does running
    out of input between two items. An Incomplete on leftover input is passed
    on; wrap `parser` in `complete()` to stop there instead.
    """
    def _many0(input: Any) -> ParseOutcome:
        return _repeat(parser, input, [])
    return _many0

def many1(parser: Parser) -> Parser:
    """
    Like `many0`, but the first application has to succeed.
    """
    def _many1(input: Any) -> ParseOutcome:
        first = parser(input)
        if first.is_failed():
            return fail(ErrorCode.MANY1, input)
        if first.is_incomplete():
            return first
        values: List[Any] = [first.value]
        if _consumed(input, first.remainder) == 0:
            return Complete(first.remainder, values)
        return _repeat(parser, first.remainder, values)
    return _many1

def many_till(parser: Parser, end: Parser) -> Parser:
    """
    Applies `parser` until `end` matches, returning `(values, end_value)`.
    """
    def _many_till(input: Any) -> ParseOutcome:
        values: List[Any] = []
        rest = input
        while True:
            closing = end(rest)
            if closing.is_complete():
                return Complete(closing.remainder, (values, closing.value))
            if closing.is_incomplete():
                return closing
            outcome = parser(rest)
            if outcome.is_failed():
                return fail(ErrorCode.MANY_TILL, rest)
            if outcome.is_incomplete():
                return outcome
            if _consumed(rest, outcome.remainder) == 0:
                return fail(ErrorCode.MANY_TILL, rest)
            values.append(outcome.value)
            rest = outcome.remainder
    return _many_till

def separated_list0(separator: Parser, parser: Parser) -> Parser:
    """
    Zero or more `parser` matches with `separator` in between.

    A trailing separator followed by something that is not an item is left
    in the remainder; followed by a partial item, the result is Incomplete.
    """
    def _separated_list0(input: Any) -> ParseOutcome:
        first = parser(input)
        if first.is_incomplete():
            return first
        if first.is_failed():
            return Complete(input, [])
        values: List[Any] = [first.value]
        rest = first.remainder
        while True:
            sep = separator(rest)
            if sep.is_incomplete() and rest:
                return sep
            if not sep.is_complete():
                break
            item = parser(sep.remainder)
            if item.is_incomplete() and rest:
                return item
            if not item.is_complete():
                break
            if _consumed(rest, item.remainder) == 0:
                break
            values.append(item.value)
            rest = item.remainder
        return Complete(rest, values)
    return _separated_list0

def separated_list1(separator: Parser, parser: Parser) -> Parser:
    def _separated_list1(input: Any) -> ParseOutcome:
        outcome = separated_list0(separator, parser)(input)
        if outcome.is_complete() and not outcome.value:
            return fail(ErrorCode.SEPARATED_LIST, input)
        return outcome
    return _separated_list1

def count(parser: Parser, times: int) -> Parser:
    """
    Applies `parser` exactly `times` times.
    """
    if times < 0:
        raise ValueError(f"count must not be negative, got {times}")

    def _count(input: Any) -> ParseOutcome:
        values: List[Any] = []
        rest = input
        for _ in range(times):
            outcome = parser(rest)
            if outcome.is_failed():
                return fail(ErrorCode.COUNT, input)
            if outcome.is_incomplete():
                return outcome
            values.append(outcome.value)
            rest = outcome.remainder
        return Complete(rest, values)
    return _count

def map_(parser: Parser, fn: Callable[[Any], Any]) -> Parser:
    def _map(input: Any) -> ParseOutcome:
        outcome = parser(input)
        if outcome.is_complete():
            return Complete(outcome.remainder, fn(outcome.value))
        return outcome
    return _map

def value(result: Any, parser: Parser) -> Parser:
    return map_(parser, lambda _: result)

def map_res(
    parser: Parser,
    fn: Callable[[Any], Any],
    errors: Tuple[Type[BaseException], ...] = (ValueError,),
) -> Parser:
    """
    Maps the value through a transform that may raise.

    Exceptions listed in `errors` become a MAP_RES failure at the input
    the sub-parser started from.
    """
    def _map_res(input: Any) -> ParseOutcome:
        outcome = parser(input)
        if not outcome.is_complete():
            return outcome
        try:
            mapped = fn(outcome.value)
        except errors:
            return fail(ErrorCode.MAP_RES, input)
        return Complete(outcome.remainder, mapped)
    return _map_res

def verify(parser: Parser, predicate: Callable[[Any], bool]) -> Parser:
    def _verify(input: Any) -> ParseOutcome:
        outcome = parser(input)
        if outcome.is_complete() and not predicate(outcome.value):
            return fail(ErrorCode.VERIFY, input)
        return outcome
    return _verify

def opt(parser: Parser) -> Parser:
    """
    Optional match: a failure becomes `None` without consuming anything.
    """
    def _opt(input: Any) -> ParseOutcome:
        outcome = parser(input)
        if outcome.is_failed():
            return Complete(input, None)
        return outcome
    return _opt

def peek(parser: Parser) -> Parser:
    """
    Runs `parser` but leaves the input where it was.
    """
    def _peek(input: Any) -> ParseOutcome:
        outcome = parser(input)
        if outcome.is_complete():
            return Complete(input, outcome.value)
        return outcome
    return _peek

def not_(parser: Parser) -> Parser:
    """
    Succeeds, consuming nothing, only when `parser` fails.
    """
    def _not(input: Any) -> ParseOutcome:
        outcome = parser(input)
        if outcome.is_failed():
            return Complete(input, None)
        if outcome.is_incomplete():
            return outcome
        return fail(ErrorCode.NOT, input)
    return _not

def recognize(parser: Parser) -> Parser:
    """
    Returns the slice of input the parser consumed instead of its value.
    """
    def _recognize(input: Any) -> ParseOutcome:
        outcome = parser(input)
        if outcome.is_complete():
            return Complete(outcome.remainder, input[:_consumed(input, outcome.remainder)])
        return outcome
    return _recognize

def complete(parser: Parser) -> Parser:
    """
    Treats the input as final: an Incomplete turns into a COMPLETE failure.
    """
    def _complete(input: Any) -> ParseOutcome:
        outcome = parser(input)
        if outcome.is_incomplete():
            return fail(ErrorCode.COMPLETE, input)
        return outcome
    return _complete

def eof(input: Any) -> ParseOutcome:
    if input:
        return fail(ErrorCode.EOF, input)
    return Complete(input, input)

class ParseFailure(ValueError):
    """
    Raised by `parse_all` when the input does not parse to the end.
    """
    def __init__(self, message: str, outcome: ParseOutcome, offset: Any = None) -> None:
        super().__init__(message)
        self.outcome: ParseOutcome = outcome
        self.offset = offset

def parse_all(parser: Parser, data: Any) -> Any:
    """
    Parse a complete input and return the value.

    Raises ParseFailure when the parser fails, asks for more input, or stops
    before the end of `data`.
    """
    outcome = parser(data)
    if isinstance(outcome, Failed):
        error: ParseError = outcome.error
        offset = error.offset_in(data)
        raise ParseFailure(f"Failed to parse: rule {error.rule()} at offset {offset}", outcome, offset)
    if isinstance(outcome, Incomplete):
        raise ParseFailure(f"Failed to parse: input ended early, {outcome.needed!r}", outcome, len(data))

    if outcome.remainder:
        offset = _consumed(data, outcome.remainder)
        raise ParseFailure(f"Failed to parse entire input. Remaining input: {outcome.remainder!r}", outcome, offset)

    return outcome.value

from typing import Any, Callable, Generic, Optional, TypeVar, Union
from dataclasses import dataclass
from enum import IntEnum

I = TypeVar('I', str, bytes)
O = TypeVar('O')

class ErrorCode(IntEnum):
    """
    One code per rule that can fail.
    """
    TAG = 1
    TAKE_WHILE1 = 2
    ONE_OF = 3
    NONE_OF = 4
    CHAR = 5
    CRLF = 6
    ALPHA = 7
    DIGIT = 8
    HEX_DIGIT = 9
    ALPHANUMERIC = 10
    SPACE = 11
    MULTISPACE = 12
    ALT = 13
    MANY1 = 14
    MANY_TILL = 15
    COUNT = 16
    SEPARATED_LIST = 17
    MAP_RES = 18
    VERIFY = 19
    COMPLETE = 20
    EOF = 21
    NOT = 22
    # Application codes start here
    CUSTOM = 1000

@dataclass(frozen=True)
class Needed:
    """How much input a parser wants before it can decide. `None` means unknown."""
    size: Optional[int] = None

    def is_known(self) -> bool:
        return self.size is not None

    def __repr__(self) -> str:
        if self.size is None:
            return "Needed(unknown)"
        return f"Needed({self.size})"

Needed.UNKNOWN = Needed()

@dataclass(frozen=True)
class ParseError:
    """
    A rule code plus the input slice the rule was looking at when it failed.
    """
    code: int
    input: Any = None

    def offset_in(self, original: Union[str, bytes]) -> Optional[int]:
        """
        Position of the failure inside `original`, or None when no input was recorded.
        """
        if self.input is None:
            return None
        return len(original) - len(self.input)

    def rule(self) -> str:
        try:
            return ErrorCode(self.code).name
        except ValueError:
            return str(self.code)

class ParseOutcome(Generic[I, O]):
    """
    Result of one parse attempt: Complete, Incomplete or Failed.
    """
    def is_complete(self) -> bool:
        return False

    def is_incomplete(self) -> bool:
        return False

    def is_failed(self) -> bool:
        return False

@dataclass(frozen=True)
class Complete(ParseOutcome[I, O]):
    remainder: I
    value: O

    def is_complete(self) -> bool:
        return True

@dataclass(frozen=True)
class Incomplete(ParseOutcome[Any, Any]):
    needed: Needed = Needed.UNKNOWN

    def is_incomplete(self) -> bool:
        return True

@dataclass(frozen=True)
class Failed(ParseOutcome[Any, Any]):
    error: ParseError

    def is_failed(self) -> bool:
        return True

Parser = Callable[[I], ParseOutcome[I, O]]

def fail(code: int, input: Any = None) -> Failed:
    return Failed(ParseError(code, input))

def need(size: Optional[int] = None) -> Incomplete:
    return Incomplete(Needed(size))

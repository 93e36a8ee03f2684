from nibble.abstract import Complete, ErrorCode, Failed, Incomplete, Needed, ParseError
from nibble.character import anychar, char, digit1, eol, none_of, not_line_ending, space1, tag, take, take_while
from nibble.number import decimal
from nibble.parser import (
    ParseFailure,
    alt,
    chain,
    complete,
    count,
    delimited,
    eof,
    many0,
    many1,
    many_till,
    map_,
    map_res,
    not_,
    opt,
    pair,
    parse_all,
    peek,
    preceded,
    recognize,
    separated_list0,
    separated_list1,
    separated_pair,
    sequence,
    terminated,
    value,
    verify,
)


def test_alt_takes_first_match():
    f = alt(tag("ab"), tag("a"))
    assert f("abc") == Complete("c", "ab")

    g = alt(tag("a"), tag("ab"))
    assert g("abc") == Complete("bc", "a")


def test_alt_all_fail():
    f = alt(tag("x"), tag("y"))
    assert f("abc") == Failed(ParseError(ErrorCode.ALT, "abc"))


def test_alt_keeps_incomplete_branch():
    f = alt(tag("one"), anychar)
    assert f("on") == Incomplete(Needed(3))
    assert complete_alt()("on") == Complete("n", "o")


def complete_alt():
    return alt(complete(tag("one")), anychar)


def test_sequence():
    f = sequence(tag("a"), tag("b"), tag("c"))
    assert f("abcd") == Complete("d", ("a", "b", "c"))
    assert f("abx") == Failed(ParseError(ErrorCode.TAG, "x"))
    assert f("ab") == Incomplete(Needed(1))


def test_chain_builds_from_named_values():
    point = chain(
        char("("),
        ("x", decimal),
        char(","),
        ("y", decimal),
        char(")"),
        build=lambda x, y: (x, y),
    )
    assert point("(3,14)!") == Complete("!", (3, 14))
    assert point("(3;14)").is_failed()
    assert point("(3,1").is_incomplete()


def test_shorthands():
    assert pair(tag("a"), tag("b"))("abz") == Complete("z", ("a", "b"))
    assert preceded(tag("#"), digit1)("#12 ") == Complete(" ", "12")
    assert terminated(digit1, tag(";"))("12;x") == Complete("x", "12")
    assert delimited(char("["), digit1, char("]"))("[7]") == Complete("", "7")
    assert separated_pair(digit1, char("-"), digit1)("10-20") == Complete("", ("10", "20"))


def test_many0():
    f = many0(tag("ab"))
    assert f("ababc") == Complete("c", ["ab", "ab"])
    assert f("xyz") == Complete("xyz", [])
    assert f("abab") == Complete("", ["ab", "ab"])
    assert f("") == Complete("", [])


def test_many0_passes_on_partial_item():
    assert many0(tag("ab"))("aba") == Incomplete(Needed(2))
    assert many0(complete(tag("ab")))("aba") == Complete("a", ["ab"])


def test_many1():
    f = many1(tag("ab"))
    assert f("ababc") == Complete("c", ["ab", "ab"])
    assert f("xyz") == Failed(ParseError(ErrorCode.MANY1, "xyz"))
    assert f("a") == Incomplete(Needed(2))
    assert f("aba") == Incomplete(Needed(2))


def test_repetition_stops_on_zero_progress():
    nothing = take_while(lambda c: c == "!")

    assert many0(nothing)("abc") == Complete("abc", [])
    assert many1(nothing)("abc") == Complete("abc", [""])
    assert separated_list0(opt(char(",")), nothing)("abc") == Complete("abc", [""])


def test_many_till():
    f = many_till(anychar, tag("end"))
    assert f("abend!") == Complete("!", (["a", "b"], "end"))
    assert f("") == Incomplete(Needed(3))


def test_separated_list():
    numbers = separated_list0(char(","), decimal)
    assert numbers("1,2,3;") == Complete(";", [1, 2, 3])
    assert numbers("1,2,;") == Complete(",;", [1, 2])
    assert numbers("1,2,") == Incomplete(Needed(1))
    assert numbers("1,2") == Complete("", [1, 2])
    assert numbers("x") == Complete("x", [])
    assert separated_list1(char(","), decimal)("x") == Failed(ParseError(ErrorCode.SEPARATED_LIST, "x"))


def test_count():
    f = count(take(2), 3)
    assert f("aabbccdd") == Complete("dd", ["aa", "bb", "cc"])
    assert f("aabb") == Incomplete(Needed(2))
    assert count(char("a"), 2)("ab") == Failed(ParseError(ErrorCode.COUNT, "ab"))

    try:
        count(char("a"), -1)
    except ValueError:
        pass
    else:
        assert False, "expected ValueError"


def test_map_and_value():
    assert map_(digit1, int)("42x") == Complete("x", 42)
    assert map_(digit1, int)("x").is_failed()
    assert value(True, tag("yes"))("yes!") == Complete("!", True)


def test_map_res_turns_exceptions_into_failures():
    ascii_word = map_res(take(3), lambda raw: raw.decode("ascii"))
    assert ascii_word(b"abcd") == Complete(b"d", "abc")
    assert ascii_word(b"\xff\xfe\xfdx") == Failed(ParseError(ErrorCode.MAP_RES, b"\xff\xfe\xfdx"))
    assert ascii_word(b"ab") == Incomplete(Needed(3))


def test_verify():
    even = verify(map_(digit1, int), lambda n: n % 2 == 0)
    assert even("42") == Complete("", 42)
    assert even("41") == Failed(ParseError(ErrorCode.VERIFY, "41"))


def test_opt():
    f = opt(tag("-"))
    assert f("-1") == Complete("1", "-")
    assert f("1") == Complete("1", None)


def test_peek_does_not_consume():
    assert peek(tag("ab"))("abc") == Complete("abc", "ab")
    assert peek(tag("ab"))("xbc").is_failed()


def test_not():
    assert not_(tag("ab"))("xy") == Complete("xy", None)
    assert not_(tag("ab"))("ab") == Failed(ParseError(ErrorCode.NOT, "ab"))


def test_recognize():
    f = recognize(sequence(digit1, char("."), digit1))
    assert f("3.14 rest") == Complete(" rest", "3.14")


def test_eof():
    assert eof("") == Complete("", "")
    assert eof("x") == Failed(ParseError(ErrorCode.EOF, "x"))


def test_parsing_is_deterministic():
    f = many0(alt(tag("ab"), tag("c")))
    data = "abcabx"
    first = f(data)
    second = f(data)
    assert first == second
    assert len(data) - len(first.remainder) == len(data) - len(second.remainder) == 5


def check_prefixes(parser, record, expected):
    for end in range(len(record)):
        outcome = parser(record[:end])
        assert outcome.is_incomplete(), f"{record[:end]!r} gave {outcome!r}"
    assert parser(record) == Complete("", expected)


def test_record_prefixes_are_incomplete():
    check_prefixes(
        terminated(separated_list0(char(","), tag("ab")), char(";")),
        "ab,ab;",
        ["ab", "ab"],
    )
    check_prefixes(
        terminated(many0(alt(tag("ab"), tag("c"))), char(";")),
        "abcab;",
        ["ab", "c", "ab"],
    )
    check_prefixes(
        terminated(many1(tag("ab")), char(";")),
        "ababab;",
        ["ab", "ab", "ab"],
    )


# Spelled digits overlap ("eightwo"), so each word keeps its last letter
# for the next match.
SPELLED = {"on": 1, "tw": 2, "thre": 3, "four": 4, "fiv": 5, "six": 6, "seve": 7, "eigh": 8, "nin": 9}

def spelled(prefix, follower=None):
    word = tag(prefix) if follower is None else terminated(tag(prefix), peek(char(follower)))
    return complete(word)


spelled_digit = map_(
    alt(
        spelled("on", "e"),
        spelled("tw", "o"),
        spelled("thre", "e"),
        spelled("four"),
        spelled("fiv", "e"),
        spelled("six"),
        spelled("seve", "n"),
        spelled("eigh", "t"),
        spelled("nin", "e"),
    ),
    lambda word: SPELLED[word],
)

calibration = many1(
    alt(
        spelled_digit,
        map_(anychar, lambda c: int(c) if c.isdigit() else None),
    )
)


def test_spelled_word_at_end_of_line():
    assert calibration_value("1six") == 16
    assert calibration_value("nine8ni") == 98


def calibration_value(line: str) -> int:
    digits = [d for d in parse_all(calibration, line) if d is not None]
    return digits[0] * 10 + digits[-1]


def test_peek_disambiguates_overlapping_words():
    assert calibration_value("two1nine") == 29
    assert calibration_value("eightwothree") == 83
    assert calibration_value("abcone2threexyz") == 13
    assert calibration_value("xtwone3four") == 24
    assert calibration_value("4nineeightseven2") == 42
    assert calibration_value("zoneight234") == 14
    assert calibration_value("7pqrstsixteen") == 76


def test_parse_all_line_records():
    record = terminated(
        separated_pair(take_while(str.isalpha), space1, not_line_ending),
        eol,
    )
    assert parse_all(many1(record), "alpha one\nbeta two\r\n") == [("alpha", "one"), ("beta", "two")]


def test_parse_all_raises():
    try:
        parse_all(decimal, "12x")
    except ParseFailure as e:
        assert isinstance(e, ValueError)
        assert e.offset == 2
        assert "Remaining input" in str(e)
    else:
        assert False, "expected ParseFailure"

    try:
        parse_all(preceded(tag("#"), decimal), "#x")
    except ParseFailure as e:
        assert e.offset == 1
        assert e.outcome.is_failed()
    else:
        assert False, "expected ParseFailure"

    try:
        parse_all(tag("abc"), "ab")
    except ParseFailure as e:
        assert e.outcome.is_incomplete()
    else:
        assert False, "expected ParseFailure"


def test_none_of_line():
    word = recognize(many1(none_of(" \n")))
    assert word("hello world") == Complete(" world", "hello")

"""Unit tests for the tokenizer."""

import pytest

from radixcalc_pkg import config
from radixcalc_pkg.radix import Base
from radixcalc_pkg.tokenizer import TokenType, tokenize
from radixcalc_pkg.types import LexError


def kinds(source, base=Base.DECIMAL):
    return [(t.type, t.value) for t in tokenize(source, base)[:-1]]


class TestBasicTokens:
    def test_arithmetic(self):
        assert kinds("1 + 2*3") == [
            (TokenType.NUMBER, "1"),
            (TokenType.OPERATOR, "+"),
            (TokenType.NUMBER, "2"),
            (TokenType.OPERATOR, "*"),
            (TokenType.NUMBER, "3"),
        ]

    def test_positions(self):
        tokens = tokenize("12 + x")
        assert [t.position for t in tokens] == [0, 3, 5, 6]
        assert tokens[-1].type == TokenType.EOF

    def test_double_star_is_power(self):
        assert kinds("2**3")[1] == (TokenType.OPERATOR, "^")

    def test_percent_is_mod(self):
        assert kinds("7 % 3")[1] == (TokenType.OPERATOR, "mod")

    def test_punctuation(self):
        types = [t for t, _ in kinds("x = |(1, 2)|")]
        assert types == [
            TokenType.IDENTIFIER,
            TokenType.ASSIGN,
            TokenType.PIPE,
            TokenType.LPAREN,
            TokenType.NUMBER,
            TokenType.COMMA,
            TokenType.NUMBER,
            TokenType.RPAREN,
            TokenType.PIPE,
        ]

    def test_decimal_fraction(self):
        assert kinds("3.25 + .5") == [
            (TokenType.NUMBER, "3.25"),
            (TokenType.OPERATOR, "+"),
            (TokenType.NUMBER, ".5"),
        ]


class TestNamesAndFunctions:
    def test_function_with_digits_in_name(self):
        assert kinds("log10(x)")[0] == (TokenType.FUNCTION, "log10")
        assert kinds("log2(8)")[0] == (TokenType.FUNCTION, "log2")

    def test_aliases_resolve_to_canonical_names(self):
        assert kinds("tg(1)")[0] == (TokenType.FUNCTION, "tan")
        assert kinds("arccotg(1)")[0] == (TokenType.FUNCTION, "acot")
        assert kinds("SIN(1)")[0] == (TokenType.FUNCTION, "sin")

    def test_identifiers(self):
        assert kinds("my_var2") == [(TokenType.IDENTIFIER, "my_var2")]
        assert kinds("pi")[0] == (TokenType.IDENTIFIER, "pi")

    def test_lowercase_c_is_a_name(self):
        assert kinds("c")[0] == (TokenType.IDENTIFIER, "c")


class TestWordOperators:
    def test_mod_spellings(self):
        assert kinds("7 mod 3")[1] == (TokenType.OPERATOR, "mod")
        assert kinds("7 MOD 3")[1] == (TokenType.OPERATOR, "mod")

    def test_mod_without_spaces(self):
        assert kinds("5mod3") == [
            (TokenType.NUMBER, "5"),
            (TokenType.OPERATOR, "mod"),
            (TokenType.NUMBER, "3"),
        ]

    def test_combination_without_spaces(self):
        assert kinds("5C2") == [
            (TokenType.NUMBER, "5"),
            (TokenType.OPERATOR, "C"),
            (TokenType.NUMBER, "2"),
        ]

    def test_combination_function_form(self):
        assert kinds("C(5, 2)")[0] == (TokenType.OPERATOR, "C")


class TestBases:
    def test_hex_words_are_numbers(self):
        assert kinds("FF + e", Base.HEXADECIMAL) == [
            (TokenType.NUMBER, "FF"),
            (TokenType.OPERATOR, "+"),
            (TokenType.NUMBER, "e"),
        ]

    def test_hex_mode_still_knows_functions(self):
        assert kinds("abs(-1)", Base.HEXADECIMAL)[0] == (TokenType.FUNCTION, "abs")
        assert kinds("pi", Base.HEXADECIMAL)[0] == (TokenType.IDENTIFIER, "pi")

    def test_hex_fraction(self):
        tokens = tokenize("A.8", Base.HEXADECIMAL)
        assert tokens[0].type == TokenType.NUMBER
        assert tokens[0].value == "A.8"

    def test_radix_prefix_in_decimal(self):
        token = tokenize("0xFF")[0]
        assert token.type == TokenType.NUMBER
        assert token.value == "FF"
        assert token.base == Base.HEXADECIMAL
        assert tokenize("0b101")[0].base == Base.BINARY
        assert tokenize("0o17")[0].base == Base.OCTAL

    def test_prefix_letter_that_is_a_hex_digit(self):
        token = tokenize("0b101", Base.HEXADECIMAL)[0]
        assert token.value == "0b101"
        assert token.base == Base.HEXADECIMAL

    def test_number_tokens_carry_active_base(self):
        assert tokenize("101", Base.BINARY)[0].base == Base.BINARY


class TestUnicode:
    def test_operator_aliases(self):
        assert kinds("6 × 2 ÷ 3 − 1") == [
            (TokenType.NUMBER, "6"),
            (TokenType.OPERATOR, "*"),
            (TokenType.NUMBER, "2"),
            (TokenType.OPERATOR, "/"),
            (TokenType.NUMBER, "3"),
            (TokenType.OPERATOR, "-"),
            (TokenType.NUMBER, "1"),
        ]

    def test_pi_and_root_signs(self):
        assert kinds("π")[0] == (TokenType.IDENTIFIER, "pi")
        assert kinds("√4")[0] == (TokenType.OPERATOR, "√")


class TestLexErrors:
    def test_unexpected_character(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("2 # 3")
        assert exc_info.value.reason == "UNEXPECTED_CHARACTER"
        assert exc_info.value.position == 2

    def test_letter_glued_to_number(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("12g")
        assert exc_info.value.reason == "MALFORMED_NUMBER"
        assert exc_info.value.position == 2

    def test_hex_digit_in_decimal_mode(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("1A")
        assert exc_info.value.reason == "INVALID_DIGIT"
        assert exc_info.value.position == 1

    def test_digit_outside_binary(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("1 + 102", Base.BINARY)
        assert exc_info.value.reason == "INVALID_DIGIT"
        assert exc_info.value.position == 6

    def test_digit_outside_octal(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("78", Base.OCTAL)
        assert exc_info.value.position == 1

    def test_two_radix_points(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("1.2.3")
        assert exc_info.value.reason == "MALFORMED_NUMBER"

    def test_prefix_without_digits(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("0x")
        assert exc_info.value.reason == "MALFORMED_NUMBER"
        assert exc_info.value.position == 0

    def test_too_long(self, monkeypatch):
        monkeypatch.setattr(config, "MAX_INPUT_LENGTH", 10)
        with pytest.raises(LexError) as exc_info:
            tokenize("1+" * 10)
        assert exc_info.value.reason == "TOO_LONG"

    def test_error_code(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("$")
        assert exc_info.value.code == "LEX_ERROR"

import unittest

from dcalc.lang.error import GenericException
from dcalc.lang.lexical import PToken, get_span, parse_numeral, tokenize
from dcalc.lang.symbols import Apply, Num, Text


def dice(count, size):
    return Apply(Text("make-dice"), [Num(count), Num(size)])


class TokenizeTestCase(unittest.TestCase):

    def test_expressions(self):
        cases = {
            "2d6": [dice(2, 6)],
            "d20": [dice(1, 20)],
            "0d4": [dice(0, 4)],
            "12": [Num(12)],
            "make-dice": [Text("make-dice")],
            "x-y": [Text("x-y")],
            "dx": [Text("dx")],
            "_tmp": [Text("_tmp")],
            "hist d6": [Text("hist"), dice(1, 6)],
            "add 1 2": [Text("add"), Num(1), Num(2)],
        }
        for case, expected in cases.items():
            self.assertEqual(expected, [ptoken.try_to_expr() for ptoken in tokenize(case)], case)

    def test_reserved(self):
        cases = {
            "d": ["d"],
            ">>": [">>"],
            "()[]": ["(", ")", "[", "]"],
            "+-*/": ["+", "-", "*", "/"],
            ",;=:": [",", ";", "=", ":"],
            ">>>>": [">>", ">>"],
        }
        for case, expected in cases.items():
            self.assertEqual(expected, [ptoken.reserved for ptoken in tokenize(case)], case)

    def test_spans(self):
        ptokens = list(tokenize("2d6 + 3"))
        self.assertEqual([(0, 3), (4, 5), (6, 7)], [ptoken.span for ptoken in ptokens])
        self.assertEqual(dice(2, 6), ptokens[0].expr)
        self.assertTrue(ptokens[1].is_reserved("+", "-"))
        self.assertFalse(ptokens[1].is_reserved("*"))
        self.assertEqual(Num(3), ptokens[2].expr)

        self.assertEqual([(1, 2), (2, 4), (4, 5)], [ptoken.span for ptoken in tokenize(" x>>f  ")])

    def test_empty(self):
        should_be_empty = ["", " ", "\t  \n"]
        for case in should_be_empty:
            self.assertEqual([], list(tokenize(case)), case)

    def test_errors(self):
        should_raise = {
            "3 @ 4": (2, 3),
            "x ! y": (2, 3),
            "99999999999": (0, 11),
            "2d99999999999": (0, 13),
            "é": (0, 1),
        }
        for case, span in should_raise.items():
            try:
                list(tokenize(case))
            except GenericException as err:
                self.assertEqual(span, err.span, case)
            else:
                self.fail(case)

    def test_lazy(self):
        tokens = tokenize("3 @ 4")
        self.assertEqual(Num(3), next(tokens).expr)
        self.assertRaises(GenericException, next, tokens)


class HelpersTestCase(unittest.TestCase):

    def test_parse_numeral(self):
        self.assertEqual(2147483647, parse_numeral("2147483647", (0, 10)))
        self.assertEqual(0, parse_numeral("000", (0, 3)))
        self.assertRaises(GenericException, parse_numeral, "2147483648", (0, 10))

    def test_get_span(self):
        self.assertIsNone(get_span([]))
        ptokens = [PToken((2, 3), reserved="("), PToken.from_symbol(Num(1), (3, 4)), PToken((5, 6), reserved=")")]
        self.assertEqual((2, 6), get_span(ptokens))
        self.assertEqual((3, 4), get_span(ptokens[1:2]))


if __name__ == '__main__':
    unittest.main()

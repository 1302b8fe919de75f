import unittest

from dcalc.lang.error import GenericException
from dcalc.pure.types import ANY, DISTR, NIL, NUM, PRIMITIVES, FnType, SeqType, coercible_to, parse_type


class CoercionTestCase(unittest.TestCase):

    def test_coercible_to(self):
        binary = FnType((DISTR, DISTR), DISTR)

        should_pass = [
            (NUM, DISTR), (NUM, NUM), (DISTR, DISTR), (NIL, NIL),
            (ANY, NUM), (DISTR, ANY), (binary, ANY), (ANY, binary),
            (binary, FnType((DISTR, DISTR), DISTR)),
            (SeqType(NUM), SeqType(DISTR)),
        ]
        for found, expected in should_pass:
            self.assertTrue(coercible_to(found, expected), (str(found), str(expected)))

        should_fail = [
            (DISTR, NUM), (NIL, NUM), (NUM, NIL),
            (binary, DISTR), (DISTR, binary),
            (binary, FnType((NUM, DISTR), DISTR)),
            (binary, FnType((DISTR,), DISTR)),
            (FnType((NUM,), NUM), FnType((NUM,), DISTR)),
            (SeqType(DISTR), SeqType(NUM)), (SeqType(NUM), NUM),
        ]
        for found, expected in should_fail:
            self.assertFalse(coercible_to(found, expected), (str(found), str(expected)))


class FnTypeTestCase(unittest.TestCase):

    def test_curry(self):
        binary = FnType((DISTR, NIL), ANY)
        self.assertEqual(FnType((NIL,), ANY), binary.curry(1))
        self.assertEqual(FnType((), ANY), binary.curry(2))
        self.assertEqual(binary, binary.curry(0))

    def test_str(self):
        cases = {
            "Fn(Distr, Distr) -> Distr": FnType((DISTR, DISTR), DISTR),
            "Fn(Num) -> Fn(Num) -> Nil": FnType((NUM,), FnType((NUM,), NIL)),
            "Fn() -> Any": FnType((), ANY),
            "Seq<Num>": SeqType(NUM),
            "Distr": DISTR,
        }
        for expected, case in cases.items():
            self.assertEqual(expected, str(case), expected)


class ParseTypeTestCase(unittest.TestCase):

    def test_parse_type(self):
        for type_ in PRIMITIVES.values():
            self.assertEqual(type_, parse_type(str(type_)), type_)

        should_raise = ["Fn(Num) -> Num", "Seq<Num>", "num", ""]
        for case in should_raise:
            self.assertRaises(GenericException, parse_type, case)


if __name__ == '__main__':
    unittest.main()

import math
import operator
import unittest

from dcalc.lang.error import GenericException
from dcalc.pure.distr import KEY_MAX, MAX_DICE, MAX_FACES, Distr


class UnifTestCase(unittest.TestCase):

    def test_unif(self):
        for faces in range(1, 13):
            die = Distr.unif(faces)
            self.assertEqual(faces, len(die), faces)
            for face in range(1, faces + 1):
                self.assertAlmostEqual(1 / faces, die.prob(face), msg=faces)
            self.assertAlmostEqual((faces + 1) / 2, die.mean(), msg=faces)

    def test_unif_without_faces(self):
        should_raise = [0, -1, -6]
        for case in should_raise:
            self.assertRaises(GenericException, Distr.unif, case)

    def test_stacked_unifs(self):
        for count in range(1, 5):
            for faces in (2, 4, 6):
                distr = Distr.stacked_unifs(count, faces)
                case = f"{count}d{faces}"
                self.assertAlmostEqual(1.0, distr.total(), msg=case)
                self.assertEqual(count, distr.min(), case)
                self.assertEqual(count * faces, distr.max(), case)

        self.assertAlmostEqual(6 / 36, Distr.stacked_unifs(2, 6).prob(7))
        self.assertEqual(Distr.unif(8), Distr.stacked_unifs(1, 8))

    def test_stacked_unifs_zero_dice(self):
        self.assertEqual(Distr.from_num(0), Distr.stacked_unifs(0, 6))
        self.assertRaises(GenericException, Distr.stacked_unifs, -1, 6)

    def test_size_limits(self):
        self.assertEqual(MAX_FACES, len(Distr.unif(MAX_FACES)))
        should_raise = [MAX_FACES + 1, KEY_MAX]
        for case in should_raise:
            self.assertRaises(GenericException, Distr.unif, case)

        self.assertEqual(MAX_DICE, Distr.stacked_unifs(MAX_DICE, 1).try_to_scalar())
        self.assertRaises(GenericException, Distr.stacked_unifs, MAX_DICE + 1, 1)
        self.assertRaises(GenericException, Distr.stacked_unifs, 1, KEY_MAX)


class CombineTestCase(unittest.TestCase):

    def test_combine_scalars(self):
        cases = {(3, 4): 7, (0, 0): 0, (-2, 5): 3, (10, -10): 0}
        for (x, y), expected in cases.items():
            combined = Distr.from_num(x).combine(Distr.from_num(y), operator.add)
            self.assertEqual(expected, combined.try_to_scalar(), (x, y))

    def test_combine(self):
        distr = Distr.unif(6).combine(Distr.unif(6), operator.add)
        self.assertEqual(Distr.stacked_unifs(2, 6), distr)
        self.assertAlmostEqual(7.0, distr.mean())

        product = Distr.unif(2).combine(Distr.from_num(3), operator.mul)
        self.assertEqual([3, 6], product.outcomes())

    def test_combine_does_not_mutate(self):
        die = Distr.unif(4)
        die.combine(Distr.unif(4), operator.add)
        self.assertEqual(Distr.unif(4), die)

    def test_combine_fallible(self):
        def only_positive(x, y):
            if y <= 0:
                raise GenericException("not positive")
            return x + y

        coin = Distr({0: 0.5, 1: 0.5})
        self.assertRaises(GenericException, Distr.from_num(6).combine_fallible, coin, only_positive)

        try:
            Distr.from_num(6).combine_fallible(coin, only_positive)
        except GenericException as err:
            self.assertIn("not positive", err.reason)
            self.assertIn("could not combine outcomes", err.reason)

        combined = Distr.from_num(6).combine_fallible(Distr.unif(2), only_positive)
        self.assertEqual([7, 8], combined.outcomes())


class StatisticsTestCase(unittest.TestCase):

    def test_stdev(self):
        self.assertAlmostEqual(math.sqrt(35 / 12), Distr.unif(6).stdev())
        self.assertAlmostEqual(0.0, Distr.from_num(5).stdev())

    def test_try_to_scalar(self):
        self.assertEqual(4, Distr.from_num(4).try_to_scalar())

        should_raise = [Distr.unif(6), Distr(), Distr({1: 0.5, 2: 0.5})]
        for case in should_raise:
            self.assertRaises(GenericException, case.try_to_scalar)


class ViewTestCase(unittest.TestCase):

    def test_stat_view(self):
        self.assertEqual("<Mean: 3.500, Stdev: 1.708>", Distr.unif(6).stat_view())
        self.assertEqual("<Mean: 2.000, Stdev: 0.000>", Distr.from_num(2).stat_view())

    def test_table_view(self):
        expected = "  x | P(x)\n ---╋-----\n  1 | 0.50000\n  2 | 0.50000\n"
        self.assertEqual(expected, Distr.unif(2).table_view())

    def test_hist_view(self):
        expected = " 1: " + "X" * 16 + "\n 2: \n 3: " + "X" * 50 + "\n"
        self.assertEqual(expected, Distr({3: 0.75, 1: 0.25}).hist_view())
        self.assertEqual("The Never Distribution.", Distr().hist_view())


if __name__ == '__main__':
    unittest.main()

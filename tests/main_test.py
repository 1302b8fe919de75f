import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout

from dcalc.main import main


class MainTestCase(unittest.TestCase):

    def run_file(self, source, *flags):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "main.dc")
            with open(path, "w") as file:
                file.write(source)

            out = io.StringIO()
            with redirect_stdout(out):
                main([path, *flags])
        return out.getvalue()

    def test_file(self):
        self.assertEqual("5\n12\n", self.run_file("x = 2 + 3\nx\n(* 2) 6\n"))

    def test_no_std(self):
        self.assertEqual("7\n", self.run_file("7\n", "--no-std"))
        with self.assertRaises(SystemExit):
            self.run_file("1 + 2\n", "--no-std")


if __name__ == '__main__':
    unittest.main()

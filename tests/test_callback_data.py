import unittest

from interfaces.telegram.callback_data import (
    encode_close_confirmation,
    parse_close_confirmation,
)


class CloseConfirmationCallbackTests(unittest.TestCase):
    def test_encode(self):
        self.assertEqual(encode_close_confirmation(12, True), "close:yes:12")
        self.assertEqual(encode_close_confirmation(12, False), "close:no:12")

    def test_parse(self):
        self.assertEqual(parse_close_confirmation("close:yes:7"), (True, 7))
        self.assertEqual(parse_close_confirmation("close:no:7"), (False, 7))

    def test_parse_rejects_garbage(self):
        for data in ("close:maybe:1", "open:yes:1", "close:yes", "close:yes:x"):
            with self.subTest(data=data):
                with self.assertRaises(ValueError):
                    parse_close_confirmation(data)


if __name__ == "__main__":
    unittest.main()

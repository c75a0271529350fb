import base64
import unittest

from cryptography.fernet import Fernet

from clair.errors import KeyValidationError
from clair.pagination import FernetKeyCodec, ensure_pagination_key


class FernetKeyCodecTests(unittest.TestCase):
    def setUp(self) -> None:
        self.codec = FernetKeyCodec()

    def test_generated_key_round_trips(self) -> None:
        key = self.codec.generate()
        self.assertEqual(len(key), 32)
        text = self.codec.encode(key)
        self.assertEqual(self.codec.decode(text), key)

    def test_accepts_keys_from_fernet(self) -> None:
        text = Fernet.generate_key().decode("ascii")
        self.assertEqual(len(self.codec.decode(text)), 32)

    def test_rejects_invalid_keys(self) -> None:
        short = base64.urlsafe_b64encode(b"x" * 16).decode("ascii")
        standard_alphabet = base64.b64encode(b"\xfb" * 32).decode("ascii")
        for text in ("not-a-key", "", short, standard_alphabet, "a" * 43 + "!"):
            with self.subTest(text=text):
                with self.assertRaises(ValueError):
                    self.codec.decode(text)


class EnsurePaginationKeyTests(unittest.TestCase):
    def test_generates_missing_key(self) -> None:
        options = {"source": "host=db"}
        with self.assertLogs("clair.pagination.keys", level="WARNING"):
            result = ensure_pagination_key(options)
        self.assertEqual(result["source"], "host=db")
        self.assertEqual(len(base64.urlsafe_b64decode(result["paginationkey"])), 32)
        self.assertNotIn("paginationkey", options)

    def test_generated_keys_are_distinct(self) -> None:
        first = ensure_pagination_key({})["paginationkey"]
        second = ensure_pagination_key({})["paginationkey"]
        self.assertNotEqual(first, second)

    def test_keeps_valid_configured_key(self) -> None:
        key = Fernet.generate_key().decode("ascii")
        self.assertEqual(ensure_pagination_key({"paginationkey": key})["paginationkey"], key)

    def test_invalid_configured_key_is_fatal(self) -> None:
        for value in ("not-a-key", "", 12345):
            with self.subTest(value=value):
                with self.assertRaises(KeyValidationError) as ctx:
                    ensure_pagination_key({"paginationkey": value})
                self.assertIn("URL-safe base64", str(ctx.exception))

    def test_uses_supplied_codec(self) -> None:
        class FixedCodec:
            key_size = 4

            def generate(self) -> bytes:
                return b"abcd"

            def encode(self, key: bytes) -> str:
                return key.hex()

            def decode(self, text: str) -> bytes:
                raw = bytes.fromhex(text)
                if len(raw) != self.key_size:
                    raise ValueError("wrong size")
                return raw

        codec = FixedCodec()
        self.assertEqual(ensure_pagination_key({}, codec=codec)["paginationkey"], "61626364")
        with self.assertRaises(KeyValidationError) as ctx:
            ensure_pagination_key({"paginationkey": "ff"}, codec=codec)
        self.assertIn("4-byte", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()

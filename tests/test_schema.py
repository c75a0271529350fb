import unittest
from datetime import timedelta

from clair.config.schema import KEY_TABLE, ConfigKey, KeyTable, ValueKind
from clair.errors import TypeCoercionError


class KeyTableTests(unittest.TestCase):
    def test_default_table_covers_recognized_keys(self) -> None:
        for path in (
            "database.type",
            "database.options.source",
            "database.options.cachesize",
            "database.options.paginationkey",
            "api.port",
            "api.healthport",
            "api.timeout",
            "api.cafile",
            "api.certfile",
            "api.keyfile",
            "updater.interval",
            "notifier.attempts",
            "notifier.renotifyinterval",
        ):
            with self.subTest(path=path):
                self.assertIn(path, KEY_TABLE)

    def test_notifier_keys_target_notifier_section(self) -> None:
        self.assertEqual(KEY_TABLE.get("notifier.attempts").target, ("notifier", "attempts"))
        self.assertEqual(KEY_TABLE.get("notifier.renotifyinterval").target, ("notifier", "renotify_interval"))

    def test_rejects_duplicate_paths(self) -> None:
        with self.assertRaises(ValueError):
            KeyTable(
                [
                    ConfigKey("database.type", ValueKind.STRING, ("database", "type")),
                    ConfigKey("database.type", ValueKind.STRING, ("database", "type")),
                ]
            )

    def test_rejects_unknown_target_field(self) -> None:
        with self.assertRaises(ValueError):
            KeyTable([ConfigKey("api.addr", ValueKind.STRING, ("api", "addr"))])

    def test_rejects_index_into_non_mapping_field(self) -> None:
        with self.assertRaises(ValueError):
            KeyTable([ConfigKey("api.port.x", ValueKind.INT, ("api", "port", "x"))])


class ConfigKeyTests(unittest.TestCase):
    def test_env_var_name(self) -> None:
        key = KEY_TABLE.get("database.options.source")
        self.assertEqual(key.env_var_name("CLAIR"), "CLAIR_DATABASE_OPTIONS_SOURCE")
        self.assertEqual(key.env_var_name("clair_"), "CLAIR_DATABASE_OPTIONS_SOURCE")

    def test_coerce_int_from_text_and_yaml(self) -> None:
        key = KEY_TABLE.get("api.healthport")
        self.assertEqual(key.coerce("7070"), 7070)
        self.assertEqual(key.coerce(7070), 7070)
        self.assertEqual(key.coerce(" +7070 "), 7070)

    def test_coerce_int_rejects_garbage_and_booleans(self) -> None:
        key = KEY_TABLE.get("api.healthport")
        for raw in ("seventy", True, 1.5, "1_0", "\u0663", "0x10", "1e3", ""):
            with self.subTest(raw=raw):
                with self.assertRaises(TypeCoercionError) as ctx:
                    key.coerce(raw, layer="file")
                self.assertEqual(ctx.exception.key, "api.healthport")
                self.assertEqual(ctx.exception.layer, "file")

    def test_coerce_int_enforces_minimum(self) -> None:
        with self.assertRaises(TypeCoercionError):
            KEY_TABLE.get("notifier.attempts").coerce("0")

    def test_coerce_duration(self) -> None:
        key = KEY_TABLE.get("updater.interval")
        self.assertEqual(key.coerce("30m"), timedelta(minutes=30))
        self.assertEqual(key.coerce(0), timedelta(0))
        with self.assertRaises(TypeCoercionError):
            key.coerce("5 bananas")
        with self.assertRaises(TypeCoercionError):
            key.coerce(3600)
        with self.assertRaises(TypeCoercionError):
            key.coerce("-1h")

    def test_coerce_string_list(self) -> None:
        key = KEY_TABLE.get("updater.enabledupdaters")
        self.assertEqual(key.coerce("debian, alpine,,ubuntu"), ("debian", "alpine", "ubuntu"))
        self.assertEqual(key.coerce(["rhel", "oracle"]), ("rhel", "oracle"))

    def test_coerce_string_keeps_scalars_as_text(self) -> None:
        key = KEY_TABLE.get("database.type")
        self.assertEqual(key.coerce(42), "42")
        with self.assertRaises(TypeCoercionError):
            key.coerce({"nested": "map"})


if __name__ == "__main__":
    unittest.main()

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
import os
import tempfile
import unittest

from cms_export.src.errors import ConfigurationError, DestinationError
from cms_export.src.settings import (
    DEFAULTS,
    build_export_name,
    normalize_folder,
    parse_arguments,
    resolve_destination_folder,
    resolve_settings,
    validate_arguments,
)

MOMENT = datetime(2024, 3, 2, 10, 15, 30, tzinfo=timezone.utc)


class ArgumentValidationTests(unittest.TestCase):
    def _validate(self, argv):
        validate_arguments(parse_arguments(argv))

    def test_single_selector_is_accepted(self) -> None:
        self._validate(["--from", "staging"])
        self._validate(["--environment-id", "staging"])

    def test_both_selectors_rejected(self) -> None:
        with self.assertRaises(ConfigurationError) as ctx:
            self._validate(["--from", "a", "--environment-id", "b"])
        self.assertIn("'--environment-id' or '--from'", str(ctx.exception))

    def test_missing_selector_rejected(self) -> None:
        with self.assertRaises(ConfigurationError) as ctx:
            self._validate(["--space-id", "abc"])
        self.assertIn("environment-id should be specified", str(ctx.exception))

    def test_empty_selector_rejected(self) -> None:
        for argv in (["--from", ""], ["--from", "  "], ["--environment-id", ""]):
            with self.subTest(argv=argv):
                with self.assertRaises(ConfigurationError):
                    self._validate(argv)

    def test_empty_credential_flags_rejected(self) -> None:
        for argv in (
            ["--from", "a", "--space-id", ""],
            ["--from", "a", "--management-token", " "],
            ["--from", "a", "--mt", ""],
        ):
            with self.subTest(argv=argv):
                with self.assertRaises(ConfigurationError) as ctx:
                    self._validate(argv)
                self.assertIn("requires a non-empty value", str(ctx.exception))

    def test_both_token_flags_rejected(self) -> None:
        with self.assertRaises(ConfigurationError) as ctx:
            self._validate(["--from", "a", "--management-token", "A", "--mt", "B"])
        self.assertIn("'--management-token' or '--mt'", str(ctx.exception))

    def test_max_allowed_limit_must_be_positive(self) -> None:
        for value in ("0", "-5", "ten", "1.5"):
            with self.subTest(value=value):
                with self.assertRaises(ConfigurationError):
                    self._validate(["--from", "a", "--max-allowed-limit", value])

    def test_unknown_flag_is_configuration_error(self) -> None:
        with self.assertRaises(ConfigurationError):
            parse_arguments(["--from", "a", "--bogus"])

    def test_abbreviations_are_not_expanded(self) -> None:
        with self.assertRaises(ConfigurationError):
            parse_arguments(["--environment", "a"])


class DestinationFolderTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def test_normalize_folder(self) -> None:
        self.assertEqual(normalize_folder("out"), f"out{os.sep}")
        self.assertEqual(normalize_folder(f"out{os.sep}{os.sep}"), f"out{os.sep}")

    def test_default_folder_created(self) -> None:
        folder = resolve_destination_folder(self.root, None, "export")

        self.assertEqual(folder, f"{self.root / 'export'}{os.sep}")
        self.assertTrue((self.root / "export").is_dir())
        self.assertEqual(sorted(p.name for p in self.root.iterdir()), ["export"])

    def test_default_folder_reused(self) -> None:
        (self.root / "export").mkdir()
        (self.root / "export" / "previous.zip").write_bytes(b"")
        folder = resolve_destination_folder(self.root, None, "export")
        self.assertTrue(folder.endswith(f"export{os.sep}"))
        self.assertTrue((self.root / "export" / "previous.zip").exists())

    def test_default_folder_only_one_level(self) -> None:
        with self.assertRaises(DestinationError):
            resolve_destination_folder(self.root, None, "a/b")
        self.assertFalse((self.root / "a").exists())

    def test_explicit_missing_folder_not_created(self) -> None:
        with self.assertRaises(DestinationError):
            resolve_destination_folder(self.root, str(self.root / "missing"), "export")
        self.assertFalse((self.root / "missing").exists())
        self.assertFalse((self.root / "export").exists())

    def test_explicit_existing_folder(self) -> None:
        target = self.root / "out"
        target.mkdir()
        folder = resolve_destination_folder(self.root, f"{target}{os.sep}{os.sep}", "export")
        self.assertEqual(folder, f"{target}{os.sep}")

    def test_relative_explicit_folder_anchored_at_working_dir(self) -> None:
        (self.root / "out").mkdir()
        folder = resolve_destination_folder(self.root, "out", "export")
        self.assertEqual(folder, f"{self.root / 'out'}{os.sep}")

    def test_filesystem_root_rejected(self) -> None:
        with self.assertRaises(DestinationError):
            resolve_destination_folder(self.root, os.sep, "export")
        with self.assertRaises(DestinationError):
            resolve_destination_folder(self.root, None, os.sep)

    def test_file_is_not_a_destination(self) -> None:
        (self.root / "file").write_text("x")
        with self.assertRaises(DestinationError):
            resolve_destination_folder(self.root, str(self.root / "file"), "export")


class ResolveSettingsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def _resolve(self, argv, environment=None):
        return resolve_settings(self.root, argv, environment or {}, now=MOMENT)

    def test_export_name_format(self) -> None:
        self.assertEqual(
            build_export_name("abc123", "staging", MOMENT),
            "2024-03-02-10-15-30-abc123-staging",
        )

    def test_defaults(self) -> None:
        settings = self._resolve(["--environment-id", "staging"])

        self.assertEqual(settings.environment_id, "staging")
        self.assertEqual(settings.space_id, DEFAULTS.space_id)
        self.assertEqual(settings.management_token, DEFAULTS.management_token)
        self.assertEqual(settings.max_entries, 100)
        self.assertTrue(settings.include_drafts)
        self.assertFalse(settings.include_assets)
        self.assertFalse(settings.is_verbose)
        self.assertFalse(settings.should_compress_folder)
        self.assertEqual(settings.root_destination_folder, f"{self.root / 'export'}{os.sep}")
        self.assertEqual(
            settings.default_export_name,
            f"2024-03-02-10-15-30-{DEFAULTS.space_id}-staging",
        )

    def test_environment_values_used_when_no_flags(self) -> None:
        settings = self._resolve(
            ["--from", "staging"],
            {
                "CMS_SPACE_ID": "abc123",
                "CMS_MANAGEMENT_TOKEN": "env-token",
                "CMS_MAX_ALLOWED_LIMIT": "250",
                "CMS_EXPORT_DIR": "dumps",
            },
        )

        self.assertEqual(settings.space_id, "abc123")
        self.assertEqual(settings.management_token, "env-token")
        self.assertEqual(settings.max_entries, 250)
        self.assertEqual(settings.root_destination_folder, f"{self.root / 'dumps'}{os.sep}")
        self.assertEqual(settings.default_export_name, "2024-03-02-10-15-30-abc123-staging")

    def test_flags_beat_environment_values(self) -> None:
        (self.root / "explicit").mkdir()
        settings = self._resolve(
            [
                "--from", "staging",
                "--space-id", "cli-space",
                "--mt", "cli-token",
                "--max-allowed-limit", "10",
                "--export-dir", str(self.root / "explicit"),
            ],
            {
                "CMS_SPACE_ID": "abc123",
                "CMS_MANAGEMENT_TOKEN": "env-token",
                "CMS_MAX_ALLOWED_LIMIT": "250",
                "CMS_EXPORT_DIR": "dumps",
            },
        )

        self.assertEqual(settings.space_id, "cli-space")
        self.assertEqual(settings.management_token, "cli-token")
        self.assertEqual(settings.max_entries, 10)
        self.assertEqual(settings.root_destination_folder, f"{self.root / 'explicit'}{os.sep}")
        self.assertFalse((self.root / "dumps").exists())

    def test_empty_environment_values_fall_back_to_defaults(self) -> None:
        settings = self._resolve(["--from", "staging"], {"CMS_SPACE_ID": ""})
        self.assertEqual(settings.space_id, DEFAULTS.space_id)

    def test_boolean_flags(self) -> None:
        settings = self._resolve(
            ["--from", "staging", "--only-published", "--download-assets", "--verbose", "--compress"]
        )
        self.assertFalse(settings.include_drafts)
        self.assertTrue(settings.include_assets)
        self.assertTrue(settings.is_verbose)
        self.assertTrue(settings.should_compress_folder)

    def test_invalid_environment_limit(self) -> None:
        with self.assertRaises(ConfigurationError) as ctx:
            self._resolve(["--from", "staging"], {"CMS_MAX_ALLOWED_LIMIT": "abc"})
        self.assertIn("CMS_MAX_ALLOWED_LIMIT", str(ctx.exception))
        self.assertEqual(list(self.root.iterdir()), [])

    def test_conflicting_flags_create_nothing(self) -> None:
        cases = [
            ["--from", "a", "--environment-id", "b"],
            ["--space-id", "abc"],
            ["--from", "a", "--management-token", "A", "--mt", "B"],
        ]
        for argv in cases:
            with self.subTest(argv=argv):
                with self.assertRaises(ConfigurationError):
                    self._resolve(argv)
                self.assertEqual(list(self.root.iterdir()), [])

    def test_derived_paths(self) -> None:
        settings = self._resolve(["--from", "staging", "--space-id", "abc123"])
        root = settings.root_destination_folder
        name = "2024-03-02-10-15-30-abc123-staging"

        self.assertEqual(settings.export_folder, f"{root}{name}{os.sep}")
        self.assertEqual(settings.content_file_name, f"{name}.json")
        self.assertEqual(settings.log_file_name, f"{name}.log")
        self.assertEqual(settings.archive_path, f"{root}{name}.zip")

    def test_settings_are_immutable(self) -> None:
        settings = self._resolve(["--from", "staging"])
        with self.assertRaises(AttributeError):
            settings.space_id = "other"  # type: ignore[misc]

    def test_to_mapping_masks_token(self) -> None:
        settings = self._resolve(["--from", "staging", "--mt", "CFPAT-secret"])
        self.assertEqual(settings.to_mapping()["management_token"], "CFPA********")


if __name__ == "__main__":
    unittest.main()

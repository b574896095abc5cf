#!/usr/bin/env python3

import json
import unittest
from pathlib import Path
from unittest import mock

from PIL import Image
from typer.testing import CliRunner

from appmeta import __version__
from appmeta.cli.main import app
from appmeta.core.store import StoreURL

from .testcommon import (
    ArscBuilder,
    Ref,
    build_apk,
    build_ipa,
    cgbi_png,
    info_plist,
    isolate_config,
    manifest_xml,
    mkdtemp,
    png_bytes,
)

STORE_URL = StoreURL("https://apps.apple.com/us/app/hello-world/id1234567890?uo=4")


class CliTest(unittest.TestCase):
    def setUp(self):
        isolate_config(self)
        self._td = mkdtemp()
        self.testdir = Path(self._td.name)
        self.runner = CliRunner()

        builder = ArscBuilder()
        label_id = builder.add("string", 0, "app_name", "Hello World")
        icon_id = builder.add(
            "mipmap", 0, "ic_launcher", "res/mipmap-xxxhdpi/ic_launcher.png", density=640
        )
        self.apk = build_apk(
            self.testdir / "helloworld.apk",
            manifest_xml(label=Ref(label_id), icon=Ref(icon_id)),
            arsc=builder.build(),
            files={"res/mipmap-xxxhdpi/ic_launcher.png": png_bytes(size=(192, 192))},
        )
        self.ipa = build_ipa(
            self.testdir / "HelloWorld.ipa",
            info_plist(),
            files={"AppIcon-180.png": cgbi_png(1, 1, [(255, 0, 0, 255)])},
        )

    def tearDown(self):
        self._td.cleanup()

    def test_version(self):
        result = self.runner.invoke(app, ["--version"])
        self.assertEqual(0, result.exit_code)
        self.assertIn(f"appmeta {__version__}", result.output)

    def test_info_table(self):
        result = self.runner.invoke(app, ["info", str(self.apk)])
        self.assertEqual(0, result.exit_code, result.output)
        self.assertIn("com.example.helloworld", result.output)
        self.assertIn("Hello World", result.output)

    def test_info_json(self):
        result = self.runner.invoke(app, ["info", str(self.apk), "--json"])
        self.assertEqual(0, result.exit_code, result.output)
        data = json.loads(result.stdout)
        self.assertEqual("android", data["platform"])
        self.assertEqual("Hello World", data["name"])
        self.assertEqual("com.example.helloworld", data["bundle_id"])
        self.assertEqual("1.0", data["version"])
        self.assertEqual("1", data["build"])
        self.assertEqual(self.apk.stat().st_size, data["size"])
        self.assertTrue(data["has_icon"])
        self.assertNotIn("icon", data)
        self.assertNotIn("store_url", data)

    def test_info_json_ios_with_store(self):
        with mock.patch("appmeta.cli.info.get_app_store_url", return_value=STORE_URL) as lookup:
            result = self.runner.invoke(app, ["info", str(self.ipa), "--json", "--store"])
        self.assertEqual(0, result.exit_code, result.output)
        lookup.assert_called_once_with("com.kthcorp.helloworld")
        data = json.loads(result.stdout)
        self.assertEqual("ios", data["platform"])
        self.assertEqual("HelloWorld", data["name"])
        self.assertEqual(STORE_URL, data["store_url"])

    def test_info_store_skipped_for_android(self):
        with mock.patch("appmeta.cli.info.get_app_store_url") as lookup:
            result = self.runner.invoke(app, ["info", str(self.apk), "--store", "--json"])
        self.assertEqual(0, result.exit_code, result.output)
        lookup.assert_not_called()

    def test_info_icon_out(self):
        output = self.testdir / "out" / "icon.png"
        result = self.runner.invoke(app, ["info", str(self.ipa), "--icon-out", str(output)])
        self.assertEqual(0, result.exit_code, result.output)
        with Image.open(output) as image:
            self.assertEqual((1, 1), image.size)
            self.assertEqual((255, 0, 0, 255), image.convert("RGBA").getpixel((0, 0)))

    def test_info_unknown_platform(self):
        path = self.testdir / "file.zip"
        path.write_bytes(b"")
        result = self.runner.invoke(app, ["info", str(path)])
        self.assertEqual(1, result.exit_code)
        self.assertIn("Unknown platform", result.output)

    def test_info_missing_manifest(self):
        path = build_apk(self.testdir / "empty.apk", None, files={"classes.dex": b""})
        result = self.runner.invoke(app, ["info", str(path)])
        self.assertEqual(1, result.exit_code)
        self.assertIn("AndroidManifest.xml not found", result.output)

    def test_info_nonexistent_path(self):
        result = self.runner.invoke(app, ["info", str(self.testdir / "missing.apk")])
        self.assertNotEqual(0, result.exit_code)

    def test_icon(self):
        output = self.testdir / "icon.png"
        result = self.runner.invoke(app, ["icon", str(self.apk), str(output)])
        self.assertEqual(0, result.exit_code, result.output)
        with Image.open(output) as image:
            self.assertEqual((192, 192), image.size)

    def test_icon_missing(self):
        path = build_ipa(self.testdir / "noicon.ipa", info_plist())
        output = self.testdir / "icon.png"
        result = self.runner.invoke(app, ["icon", str(path), str(output)])
        self.assertEqual(1, result.exit_code)
        self.assertFalse(output.exists())

    def test_store(self):
        with mock.patch("appmeta.cli.store.get_app_store_url", return_value=STORE_URL):
            result = self.runner.invoke(app, ["store", "com.kthcorp.helloworld", "--json"])
        self.assertEqual(0, result.exit_code, result.output)
        data = json.loads(result.stdout)
        self.assertEqual(STORE_URL, data["url"])
        self.assertEqual(
            "https://apps.apple.com/cn/app/hello-world/id1234567890?uo=4", data["regional_url"]
        )

    def test_store_region(self):
        with mock.patch("appmeta.cli.store.get_app_store_url", return_value=STORE_URL):
            result = self.runner.invoke(
                app, ["store", "com.kthcorp.helloworld", "--region", "jp", "--json"]
            )
        data = json.loads(result.stdout)
        self.assertEqual(
            "https://apps.apple.com/jp/app/hello-world/id1234567890?uo=4", data["regional_url"]
        )

    def test_store_not_found(self):
        with mock.patch("appmeta.cli.store.get_app_store_url", return_value=StoreURL("")):
            result = self.runner.invoke(app, ["store", "com.example.none"])
        self.assertEqual(1, result.exit_code)
        self.assertIn("No App Store entry", result.output)


if __name__ == "__main__":
    unittest.main()

#!/usr/bin/env python3

import io
import itertools
import unittest
import zipfile

from appmeta.core.scanner import (
    pick_icon,
    pick_icon_candidate,
    scan_archive,
    score_icon_name,
)
from appmeta.models.app import IconCandidate


def _zip(*names):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name in names:
            zf.writestr(name, b"")
    buffer.seek(0)
    return zipfile.ZipFile(buffer)


class ScoreIconNameTest(unittest.TestCase):
    def test_scores(self):
        self.assertEqual(180, score_icon_name("Payload/App.app/AppIcon-180.png"))
        self.assertEqual(60, score_icon_name("AppIcon-060@2x.png"))
        self.assertEqual(0, score_icon_name("AppIcon-000.png"))

    def test_unscored(self):
        self.assertIsNone(score_icon_name("Payload/App.app/AppIcon60x60@2x.png"))
        self.assertIsNone(score_icon_name("AppIcon-12.png"))


class PickIconTest(unittest.TestCase):
    def test_largest_resolution_in_any_order(self):
        names = ["AppIcon-060.png", "AppIcon-120.png", "AppIcon-180.png"]
        for order in itertools.permutations(names):
            with self.subTest(order=order):
                self.assertEqual("AppIcon-180.png", pick_icon(order))

    def test_no_suffix_falls_back_to_last(self):
        names = ["a/AppIcon60x60@2x.png", "b/AppIcon76x76.png", "c/AppIcon40x40.png"]
        self.assertEqual("c/AppIcon40x40.png", pick_icon(names))

    def test_first_wins_ties(self):
        names = ["a/AppIcon-120.png", "b/AppIcon-120.png"]
        self.assertEqual("a/AppIcon-120.png", pick_icon(names))

    def test_unscored_never_beats_scored(self):
        names = ["AppIcon-000.png", "AppIcon83.5x83.5@2x~ipad.png"]
        self.assertEqual("AppIcon-000.png", pick_icon(names))

    def test_ignores_non_icons(self):
        self.assertEqual("AppIcon-120.png", pick_icon(["Default.png", "AppIcon-120.png", "x.nib"]))

    def test_no_candidates(self):
        self.assertIsNone(pick_icon([]))
        self.assertIsNone(pick_icon(["Default.png"]))
        self.assertIsNone(pick_icon_candidate([]))

    def test_pick_candidate(self):
        candidates = [
            IconCandidate(name="x", score=None),
            IconCandidate(name="y", score=120),
            IconCandidate(name="z", score=None),
        ]
        self.assertEqual("y", pick_icon_candidate(candidates).name)


class ScanArchiveTest(unittest.TestCase):
    def test_android(self):
        entries = scan_archive(_zip("AndroidManifest.xml", "classes.dex", "resources.arsc"))
        self.assertEqual("AndroidManifest.xml", entries.manifest.filename)
        self.assertIsNone(entries.plist)
        self.assertIsNone(entries.icon)

    def test_manifest_name_is_exact(self):
        entries = scan_archive(_zip("assets/AndroidManifest.xml", "AndroidManifest.xml.bak"))
        self.assertIsNone(entries.manifest)

    def test_ios(self):
        entries = scan_archive(
            _zip(
                "Payload/",
                "Payload/HelloWorld.app/",
                "Payload/HelloWorld.app/Info.plist",
                "Payload/HelloWorld.app/AppIcon-060.png",
                "Payload/HelloWorld.app/AppIcon-180.png",
                "Payload/HelloWorld.app/AppIcon-120.png",
            )
        )
        self.assertIsNone(entries.manifest)
        self.assertEqual("Payload/HelloWorld.app/Info.plist", entries.plist.filename)
        self.assertEqual("Payload/HelloWorld.app/AppIcon-180.png", entries.icon.filename)
        self.assertEqual([60, 180, 120], [c.score for c in entries.icon_candidates])

    def test_nested_plists_ignored(self):
        entries = scan_archive(
            _zip(
                "Payload/HelloWorld.app/Frameworks/Lib.framework/Info.plist",
                "Payload/HelloWorld.app/PlugIns/Ext.appex/Info.plist",
                "Info.plist",
            )
        )
        self.assertIsNone(entries.plist)

    def test_first_plist_wins(self):
        archive = _zip("Payload/A.app/Info.plist", "Payload/B.app/Info.plist")
        with self.assertLogs("appmeta.core.scanner", level="WARNING") as cm:
            entries = scan_archive(archive)
        self.assertEqual("Payload/A.app/Info.plist", entries.plist.filename)
        self.assertIn("Payload/B.app/Info.plist", cm.output[0])

    def test_no_icon(self):
        entries = scan_archive(_zip("Payload/HelloWorld.app/Info.plist"))
        self.assertIsNone(entries.icon)
        self.assertEqual([], entries.icon_candidates)


if __name__ == "__main__":
    unittest.main()

import json
import os
import tempfile
import unittest

import yaml

import mock_rigs  # noqa: F401  (puts the project root on sys.path)
from rigretarget import HumanBone, RetargetingOptions, load_bone_map_file, load_options


class TestRetargetingOptions(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmp.cleanup()

    def write(self, filename, text):
        path = os.path.join(self.tmp.name, filename)
        with open(path, "w") as f:
            f.write(text)
        return path

    def test_defaults(self):
        options = RetargetingOptions()
        self.assertEqual(options.custom_bone_map, {})
        self.assertTrue(options.log_warnings)
        self.assertEqual(options.animation_clip_name, "mixamo.com")
        self.assertEqual(options.output_clip_name, "vrmAnimation")
        self.assertIsNone(options.max_workers)

    def test_bone_map_values_normalized(self):
        options = RetargetingOptions(custom_bone_map={"Bip01_Pelvis": "hips"})
        self.assertIs(options.custom_bone_map["Bip01_Pelvis"], HumanBone.HIPS)

    def test_invalid_values_rejected(self):
        for kwargs in (
            {"custom_bone_map": {"a": "wing"}},
            {"custom_bone_map": ["hips"]},
            {"log_warnings": "yes"},
            {"animation_clip_name": None},
            {"output_clip_name": ""},
            {"max_workers": 0},
            {"max_workers": True},
        ):
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(ValueError):
                    RetargetingOptions(**kwargs)

    def test_from_dict_accepts_camel_case(self):
        options = RetargetingOptions.from_dict({
            "customBoneMap": {"mixamorigSpine1": "upperChest"},
            "logWarnings": False,
            "animationClipName": "Take 001",
        })
        self.assertFalse(options.log_warnings)
        self.assertEqual(options.animation_clip_name, "Take 001")
        self.assertIs(options.custom_bone_map["mixamorigSpine1"], HumanBone.UPPER_CHEST)

    def test_from_dict_rejects_unknown_keys(self):
        with self.assertRaises(ValueError):
            RetargetingOptions.from_dict({"yaw": 90})

    def test_load_yaml(self):
        path = self.write("retarget.yaml", yaml.safe_dump({
            "animation_clip_name": "walk",
            "max_workers": 2,
            "custom_bone_map": {"Bip01_Pelvis": "hips"},
        }))
        options = load_options(path)
        self.assertEqual(options.animation_clip_name, "walk")
        self.assertEqual(options.max_workers, 2)

    def test_load_json(self):
        path = self.write("retarget.json", json.dumps({"logWarnings": False}))
        self.assertFalse(load_options(path).log_warnings)

    def test_empty_yaml_gives_defaults(self):
        path = self.write("empty.yml", "")
        self.assertEqual(load_options(path).animation_clip_name, "mixamo.com")

    def test_unsupported_extension(self):
        path = self.write("retarget.toml", "")
        with self.assertRaises(ValueError):
            load_options(path)

    def test_load_bone_map_file(self):
        nested = self.write("map.json", json.dumps({"bones": {"Bip01_Spine": "spine"}}))
        flat = self.write("map.yaml", "Bip01_Head: head\n")
        self.assertEqual(load_bone_map_file(nested), {"Bip01_Spine": HumanBone.SPINE})
        self.assertEqual(load_bone_map_file(flat), {"Bip01_Head": HumanBone.HEAD})


if __name__ == "__main__":
    unittest.main()

"""
Retargeting configuration.

Options are validated once when constructed; the retargeter never sees an
invalid option set. Mapping and option files can be JSON or YAML.
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Mapping, Optional

import yaml

from .presets import DEFAULT_CLIP_NAME, DEFAULT_OUTPUT_CLIP_NAME, HumanBone

# camelCase keys accepted from JS-style configs
_ALIASES = {
    "customBoneMap": "custom_bone_map",
    "logWarnings": "log_warnings",
    "animationClipName": "animation_clip_name",
    "outputClipName": "output_clip_name",
    "maxWorkers": "max_workers",
}


@dataclass(frozen=True)
class RetargetingOptions:
    # Partial source joint -> bone role override merged over the default table
    custom_bone_map: Dict[str, HumanBone] = field(default_factory=dict)
    # Also report warnings and failures through the logger
    log_warnings: bool = True
    # Clip to pick from the source asset
    animation_clip_name: str = DEFAULT_CLIP_NAME
    output_clip_name: str = DEFAULT_OUTPUT_CLIP_NAME
    # None or 1 retargets tracks sequentially
    max_workers: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.custom_bone_map, Mapping):
            raise ValueError("custom_bone_map must be a mapping of source joint name to bone role")
        bone_map = {}
        for name, role in self.custom_bone_map.items():
            if not isinstance(name, str) or not name:
                raise ValueError(f"Invalid source joint name in custom_bone_map: {name!r}")
            try:
                bone_map[name] = HumanBone(role)
            except ValueError:
                raise ValueError(f"Unknown humanoid bone '{role}' for source joint '{name}'") from None
        object.__setattr__(self, "custom_bone_map", bone_map)

        if not isinstance(self.log_warnings, bool):
            raise ValueError("log_warnings must be a boolean")
        if not isinstance(self.animation_clip_name, str):
            raise ValueError("animation_clip_name must be a string")
        if not isinstance(self.output_clip_name, str) or not self.output_clip_name:
            raise ValueError("output_clip_name must be a non-empty string")
        if self.max_workers is not None:
            if isinstance(self.max_workers, bool) or not isinstance(self.max_workers, int) or self.max_workers < 1:
                raise ValueError("max_workers must be a positive integer or None")

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "RetargetingOptions":
        """Build options from a plain dict (snake_case or camelCase keys)."""
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in (data or {}).items():
            key = _ALIASES.get(key, key)
            if key not in known:
                raise ValueError(f"Unknown retargeting option '{key}'")
            kwargs[key] = value
        return cls(**kwargs)


def _read_config_file(filepath: str) -> Dict[str, Any]:
    ext = os.path.splitext(filepath)[1].lower()
    with open(filepath, "r") as f:
        if ext in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        elif ext == ".json":
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported config file type '{ext}' (expected .json, .yaml or .yml)")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {filepath} must contain a mapping at the top level")
    return data


def load_options(filepath: str) -> RetargetingOptions:
    return RetargetingOptions.from_dict(_read_config_file(filepath))


def load_bone_map_file(filepath: str) -> Dict[str, HumanBone]:
    """Load a bone override table, either under a "bones" key or at the top level."""
    data = _read_config_file(filepath)
    bones = data.get("bones", data)
    if not isinstance(bones, dict):
        raise ValueError(f"Mapping file {filepath}: 'bones' must be a mapping")
    return RetargetingOptions(custom_bone_map=bones).custom_bone_map

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from .geometry import (
    IDENTITY_QUAT,
    compose_matrix,
    matrix_to_quaternion,
    quaternion_multiply,
    quaternion_norm,
)
from .presets import HumanBone

# Max deviation from unit length accepted for incoming rotation keyframes
UNIT_QUAT_TOLERANCE = 1e-3


class CoordinateConvention(str, Enum):
    """Target rig coordinate convention (VRM meta version)."""

    MODERN = "1"
    LEGACY = "0"

    @classmethod
    def from_meta_version(cls, meta_version) -> "CoordinateConvention":
        if meta_version is None:
            return cls.MODERN
        return cls.LEGACY if str(meta_version).strip() == "0" else cls.MODERN


class PropertyKind(str, Enum):
    """Animated property of a joint; value is the channel suffix."""

    ROTATION = "quaternion"
    POSITION = "position"

    @property
    def stride(self) -> int:
        return 4 if self is PropertyKind.ROTATION else 3

    @classmethod
    def from_property_name(cls, name: str) -> "PropertyKind":
        for kind in cls:
            if kind.value == name:
                return kind
        raise ValueError(f"Unsupported track property '{name}'")


class WarningReason(str, Enum):
    UNMAPPED_BONE = "unmapped_bone"
    TARGET_JOINT_MISSING = "target_joint_missing"
    SOURCE_JOINT_MISSING = "source_joint_missing"
    UNSUPPORTED_PROPERTY = "unsupported_property"


class FailureReason(str, Enum):
    CLIP_NOT_FOUND = "clip_not_found"
    SCALE_UNDEFINED = "scale_undefined"
    INTERNAL_FAULT = "internal_fault"


def _frozen(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


# =============================================================================
# Skeleton
# =============================================================================


@dataclass(eq=False)
class Transform:
    """Local transform: translation, [x, y, z, w] rotation and scale."""

    translation: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: np.ndarray = field(default_factory=lambda: IDENTITY_QUAT.copy())
    scale: np.ndarray = field(default_factory=lambda: np.ones(3))

    def __post_init__(self):
        self.translation = np.asarray(self.translation, dtype=np.float64).reshape(3)
        rotation = np.asarray(self.rotation, dtype=np.float64).reshape(4)
        norm = np.linalg.norm(rotation)
        if not np.isfinite(norm) or norm < 1e-9:
            raise ValueError(f"Transform rotation must be a non-zero quaternion, got {rotation}")
        self.rotation = rotation / norm
        self.scale = np.asarray(self.scale, dtype=np.float64).reshape(3)

    def to_matrix(self) -> np.ndarray:
        return compose_matrix(self.translation, self.rotation, self.scale)

    @classmethod
    def from_matrix(cls, mat) -> "Transform":
        """Decompose a 4x4 T * R * S matrix (no shear)."""
        mat = np.asarray(mat, dtype=np.float64)
        scale = np.linalg.norm(mat[:3, :3], axis=0)
        return cls(mat[:3, 3].copy(), matrix_to_quaternion(mat), scale)


@dataclass(eq=False)
class Joint:
    name: str
    parent: Optional[str] = None  # parent joint name, None for the root
    rest: Transform = field(default_factory=Transform)


class Skeleton:
    """
    A named tree of joints living under a scene origin.

    World rest transforms are derived on demand from the local rest
    transforms; the skeleton itself is never modified after construction.
    """

    def __init__(self, joints: Iterable[Joint], name: str = "Skeleton", origin: Optional[Transform] = None):
        self.name = name
        self.origin = origin if origin is not None else Transform()
        self.joints: Dict[str, Joint] = {}
        for joint in joints:
            if joint.name in self.joints:
                raise ValueError(f"Duplicate joint name '{joint.name}' in skeleton '{name}'")
            self.joints[joint.name] = joint
        self._validate()

    def _validate(self):
        roots = [j.name for j in self.joints.values() if j.parent is None]
        if len(roots) != 1:
            raise ValueError(f"Skeleton '{self.name}' must have exactly one root joint, found {roots}")
        for joint in self.joints.values():
            if joint.parent is not None and joint.parent not in self.joints:
                raise ValueError(f"Joint '{joint.name}' references unknown parent '{joint.parent}'")
        # Every chain must end at the root
        for joint in self.joints.values():
            self.chain(joint.name)

    def __contains__(self, name) -> bool:
        return name in self.joints

    def __len__(self) -> int:
        return len(self.joints)

    @property
    def root(self) -> Joint:
        return next(j for j in self.joints.values() if j.parent is None)

    def get_joint(self, name: str) -> Optional[Joint]:
        return self.joints.get(name)

    def get_parent(self, name: str) -> Optional[Joint]:
        joint = self.joints.get(name)
        if joint is None or joint.parent is None:
            return None
        return self.joints[joint.parent]

    def chain(self, name: str) -> List[Joint]:
        """Joints from the root down to `name` (inclusive)."""
        if name not in self.joints:
            raise KeyError(name)
        chain = []
        visited = set()
        curr = self.joints[name]
        while curr is not None:
            if curr.name in visited:
                raise ValueError(f"Cycle detected in skeleton '{self.name}' at joint '{curr.name}'")
            visited.add(curr.name)
            chain.append(curr)
            curr = self.joints[curr.parent] if curr.parent is not None else None
        chain.reverse()
        return chain

    def world_rotation(self, name: str) -> np.ndarray:
        q = self.origin.rotation
        for joint in self.chain(name):
            q = quaternion_multiply(q, joint.rest.rotation)
        return q

    def world_matrix(self, name: str) -> np.ndarray:
        mat = self.origin.to_matrix()
        for joint in self.chain(name):
            mat = mat @ joint.rest.to_matrix()
        return mat

    def world_position(self, name: str) -> np.ndarray:
        return self.world_matrix(name)[:3, 3]

    def origin_position(self) -> np.ndarray:
        return self.origin.translation.copy()


@dataclass(eq=False)
class TargetRig:
    """
    Retarget destination: a skeleton plus its humanoid role table.

    `humanoid` maps each bone role the rig models to the joint name that
    carries it; roles absent from the table are not modelled by the rig.
    """

    skeleton: Skeleton
    humanoid: Dict[HumanBone, str]
    convention: CoordinateConvention = CoordinateConvention.MODERN
    hips_role: HumanBone = HumanBone.HIPS

    def __post_init__(self):
        self.humanoid = {HumanBone(role): node for role, node in self.humanoid.items()}
        self.convention = CoordinateConvention(self.convention)
        self.hips_role = HumanBone(self.hips_role)

    def get_bone_node(self, role) -> Optional[Joint]:
        node_name = self.humanoid.get(HumanBone(role))
        if node_name is None:
            return None
        return self.skeleton.get_joint(node_name)

    @property
    def hips(self) -> Optional[Joint]:
        return self.get_bone_node(self.hips_role)


# =============================================================================
# Animation
# =============================================================================


@dataclass(eq=False)
class AnimationTrack:
    """Keyframes of one joint property, channel named `<joint>.<property>`."""

    name: str
    times: np.ndarray
    values: np.ndarray

    def __post_init__(self):
        self.times = np.asarray(self.times, dtype=np.float64)
        self.values = np.asarray(self.values, dtype=np.float64)

    @property
    def joint_name(self) -> str:
        return self.name.rsplit(".", 1)[0]

    @property
    def property_name(self) -> str:
        parts = self.name.rsplit(".", 1)
        return parts[1] if len(parts) == 2 else ""

    @property
    def property_kind(self) -> PropertyKind:
        return PropertyKind.from_property_name(self.property_name)

    @property
    def stride(self) -> int:
        return self.property_kind.stride

    def samples(self) -> np.ndarray:
        return self.values.reshape(-1, self.stride)

    def validate(self):
        """Raise ValueError if the track breaks any keyframe invariant."""
        if "." not in self.name or not self.joint_name:
            raise ValueError(f"Track name '{self.name}' is not of the form '<joint>.<property>'")
        kind = self.property_kind
        if self.times.ndim != 1 or self.values.ndim != 1:
            raise ValueError(f"Track '{self.name}': times and values must be flat arrays")
        if not np.all(np.isfinite(self.times)):
            raise ValueError(f"Track '{self.name}': non-finite keyframe times")
        if self.times.size > 1 and not np.all(np.diff(self.times) > 0):
            raise ValueError(f"Track '{self.name}': keyframe times must be strictly ascending")
        if self.values.size != self.times.size * kind.stride:
            raise ValueError(
                f"Track '{self.name}': expected {self.times.size * kind.stride} values, got {self.values.size}"
            )
        if not np.all(np.isfinite(self.values)):
            raise ValueError(f"Track '{self.name}': non-finite keyframe values")
        if kind is PropertyKind.ROTATION and self.values.size:
            deviation = np.abs(quaternion_norm(self.samples()) - 1.0)
            if np.max(deviation) > UNIT_QUAT_TOLERANCE:
                raise ValueError(f"Track '{self.name}': rotation keyframes are not unit quaternions")

    def frozen(self) -> "AnimationTrack":
        """Read-only copy of this track."""
        return AnimationTrack(self.name, _frozen(self.times.copy()), _frozen(self.values.copy()))


@dataclass(frozen=True, eq=False)
class AnimationClip:
    name: str
    duration: float
    tracks: Tuple[AnimationTrack, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "tracks", tuple(self.tracks))

    def track_names(self) -> List[str]:
        return [t.name for t in self.tracks]

    def get_track(self, name: str) -> Optional[AnimationTrack]:
        return next((t for t in self.tracks if t.name == name), None)

    @staticmethod
    def find_by_name(clips: Iterable["AnimationClip"], name: str) -> Optional["AnimationClip"]:
        for clip in clips:
            if clip.name == name:
                return clip
        return None


@dataclass(eq=False)
class SourceAsset:
    """Source rig plus the clips authored for it, as produced by a loader."""

    skeleton: Skeleton
    animations: List[AnimationClip] = field(default_factory=list)


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class RetargetWarning:
    joint_name: str
    reason: WarningReason
    message: str = ""


@dataclass(frozen=True, eq=False)
class RetargetResult:
    clip: Optional[AnimationClip] = None
    failure: Optional[FailureReason] = None
    message: str = ""
    warnings: Tuple[RetargetWarning, ...] = ()

    @property
    def ok(self) -> bool:
        return self.clip is not None

    def warnings_for(self, reason: WarningReason) -> List[RetargetWarning]:
        return [w for w in self.warnings if w.reason is reason]

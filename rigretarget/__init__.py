import logging

from .utils.bone_map import BoneMap, resolve_bone
from .utils.data_types import (
    AnimationClip,
    AnimationTrack,
    CoordinateConvention,
    FailureReason,
    Joint,
    PropertyKind,
    RetargetResult,
    RetargetWarning,
    Skeleton,
    SourceAsset,
    TargetRig,
    Transform,
    WarningReason,
)
from .utils.options import RetargetingOptions, load_bone_map_file, load_options
from .utils.presets import DEFAULT_CLIP_NAME, MIXAMO_VRM_RIG_MAP, HumanBone
from .utils.retarget import (
    RestPoseResolver,
    assemble_clip,
    compute_hips_scale,
    retarget_animation,
    retarget_positions,
    retarget_rotations,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "AnimationClip",
    "AnimationTrack",
    "BoneMap",
    "CoordinateConvention",
    "DEFAULT_CLIP_NAME",
    "FailureReason",
    "HumanBone",
    "Joint",
    "MIXAMO_VRM_RIG_MAP",
    "PropertyKind",
    "RestPoseResolver",
    "RetargetResult",
    "RetargetWarning",
    "RetargetingOptions",
    "Skeleton",
    "SourceAsset",
    "TargetRig",
    "Transform",
    "WarningReason",
    "assemble_clip",
    "compute_hips_scale",
    "load_bone_map_file",
    "load_options",
    "resolve_bone",
    "retarget_animation",
    "retarget_positions",
    "retarget_rotations",
]

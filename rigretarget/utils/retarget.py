"""
Retarget a source rig animation clip onto a humanoid target rig.

Rotation keyframes are re-expressed through the source rest pose
(q' = P_rest * q * inv(R_rest)); position keyframes are scaled by the
target/source hips height ratio. Legacy (VRM 0.x) targets additionally get
their x and z components negated.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple

import numpy as np

from .bone_map import BoneMap
from .data_types import (
    AnimationClip,
    AnimationTrack,
    CoordinateConvention,
    FailureReason,
    PropertyKind,
    RetargetResult,
    RetargetWarning,
    Skeleton,
    SourceAsset,
    TargetRig,
    WarningReason,
)
from .geometry import IDENTITY_QUAT, quaternion_inverse, quaternion_multiply
from .options import RetargetingOptions
from .presets import HumanBone

logger = logging.getLogger(__name__)

# Component sign flips applied for legacy targets
_LEGACY_QUAT_SIGNS = np.array([-1.0, 1.0, -1.0, 1.0])
_LEGACY_POS_SIGNS = np.array([-1.0, 1.0, -1.0])


class RetargetError(Exception):
    reason = FailureReason.INTERNAL_FAULT


class ClipNotFoundError(RetargetError):
    reason = FailureReason.CLIP_NOT_FOUND


class ScaleUndefinedError(RetargetError):
    reason = FailureReason.SCALE_UNDEFINED


# =============================================================================
# Rest pose
# =============================================================================


class RestPoseResolver:
    """
    World-space rest rotations of a skeleton's joints, cached per instance.

    Create one per retarget call; the rest pose does not change mid-run.
    """

    def __init__(self, skeleton: Skeleton):
        self.skeleton = skeleton
        self._cache: Dict[str, Tuple[np.ndarray, np.ndarray]] = {}

    def resolve(self, joint_name: str) -> Optional[Tuple[np.ndarray, np.ndarray]]:
        """(rest world rotation, parent rest world rotation), or None for unknown joints."""
        if joint_name not in self.skeleton:
            return None
        if joint_name not in self._cache:
            rest = self.skeleton.world_rotation(joint_name)
            parent = self.skeleton.get_parent(joint_name)
            parent_rest = self.skeleton.world_rotation(parent.name) if parent else IDENTITY_QUAT.copy()
            self._cache[joint_name] = (rest, parent_rest)
        return self._cache[joint_name]

    def rest_world_rotation(self, joint_name: str) -> np.ndarray:
        resolved = self.resolve(joint_name)
        if resolved is None:
            raise KeyError(joint_name)
        return resolved[0]

    def parent_rest_world_rotation(self, joint_name: str) -> np.ndarray:
        resolved = self.resolve(joint_name)
        if resolved is None:
            raise KeyError(joint_name)
        return resolved[1]


# =============================================================================
# Scale
# =============================================================================


def get_hips_height(skeleton: Skeleton, joint_name: Optional[str]) -> Optional[float]:
    """Vertical offset of a joint's rest world position from the skeleton origin."""
    if not joint_name or joint_name not in skeleton:
        return None
    return float(abs(skeleton.world_position(joint_name)[1] - skeleton.origin_position()[1]))


def compute_hips_scale(
    source_skeleton: Skeleton,
    target_skeleton: Skeleton,
    root_joint_name: str,
    target_root_joint_name: Optional[str] = None,
) -> Optional[float]:
    """
    Ratio target hips height / source hips height.

    Returns None when either rig lacks the hips joint or a height is zero
    or non-finite.
    """
    src_h = get_hips_height(source_skeleton, root_joint_name)
    tgt_h = get_hips_height(target_skeleton, target_root_joint_name or root_joint_name)
    if src_h is None or tgt_h is None:
        return None
    if not (np.isfinite(src_h) and np.isfinite(tgt_h)) or src_h == 0.0 or tgt_h == 0.0:
        return None
    scale = tgt_h / src_h
    if not np.isfinite(scale) or scale <= 0.0:
        return None
    return scale


# =============================================================================
# Keyframe transforms
# =============================================================================


def retarget_rotations(
    values,
    rest_world_rotation,
    parent_rest_world_rotation,
    convention: CoordinateConvention = CoordinateConvention.MODERN,
) -> np.ndarray:
    """Apply P_rest * q * inv(R_rest) to every [x, y, z, w] sample of a flat array."""
    q = np.asarray(values, dtype=np.float64).reshape(-1, 4)
    out = quaternion_multiply(
        quaternion_multiply(parent_rest_world_rotation, q),
        quaternion_inverse(rest_world_rotation),
    )
    if convention is CoordinateConvention.LEGACY:
        out = out * _LEGACY_QUAT_SIGNS
    return out.reshape(-1)


def retarget_positions(
    values,
    scale: float,
    convention: CoordinateConvention = CoordinateConvention.MODERN,
) -> np.ndarray:
    """Scale every [x, y, z] sample of a flat array; legacy targets flip x and z."""
    p = np.asarray(values, dtype=np.float64).reshape(-1, 3) * scale
    if convention is CoordinateConvention.LEGACY:
        p = p * _LEGACY_POS_SIGNS
    return p.reshape(-1)


def assemble_clip(name: str, duration: float, tracks: Iterable[AnimationTrack]) -> AnimationClip:
    return AnimationClip(name, float(duration), tuple(tracks))


# =============================================================================
# Orchestration
# =============================================================================


class _TrackJob(NamedTuple):
    track: AnimationTrack
    kind: PropertyKind
    target_node: str
    rest_rotation: np.ndarray
    parent_rest_rotation: np.ndarray


def _warn(warnings: List[RetargetWarning], joint_name: str, reason: WarningReason, message: str, log: bool):
    warnings.append(RetargetWarning(joint_name, reason, message))
    if log:
        logger.warning("[Retarget] %s", message)


def _locate_clip(source: SourceAsset, clip_name: str) -> AnimationClip:
    clip = AnimationClip.find_by_name(source.animations, clip_name)
    if clip is None:
        raise ClipNotFoundError(f'Animation clip "{clip_name}" not found in source asset')
    return clip


def _find_source_hips(skeleton: Skeleton, bone_map: BoneMap, role: HumanBone) -> Optional[str]:
    for name in bone_map.source_names_for(role):
        if name in skeleton:
            return name
    return None


def _resolve_scale(source: Skeleton, target: TargetRig, bone_map: BoneMap) -> float:
    src_hips = _find_source_hips(source, bone_map, target.hips_role)
    tgt_hips = target.hips
    scale = compute_hips_scale(
        source, target.skeleton, src_hips, tgt_hips.name if tgt_hips is not None else None
    )
    if scale is None:
        raise ScaleUndefinedError(
            "Failed to calculate hips height scaling "
            f"(source hips: {src_hips}, target hips: {tgt_hips.name if tgt_hips is not None else None})"
        )
    logger.debug("[Retarget] Hips scale %.4f (source '%s' -> target '%s')", scale, src_hips, tgt_hips.name)
    return scale


def _plan_tracks(
    clip: AnimationClip,
    bone_map: BoneMap,
    target: TargetRig,
    rest_poses: RestPoseResolver,
    warnings: List[RetargetWarning],
    log: bool,
) -> List[_TrackJob]:
    jobs = []
    for track in clip.tracks:
        src_name = track.joint_name

        role = bone_map.resolve(src_name)
        if role is None:
            _warn(warnings, src_name, WarningReason.UNMAPPED_BONE,
                  f'Source joint "{src_name}" has no humanoid bone mapping, skipping track "{track.name}"', log)
            continue

        # Only rotation and position channels are retargeted (e.g. FBX .scale tracks are not)
        if track.property_name not in {kind.value for kind in PropertyKind}:
            _warn(warnings, src_name, WarningReason.UNSUPPORTED_PROPERTY,
                  f'Track "{track.name}" animates unsupported property "{track.property_name}", skipping', log)
            continue

        track.validate()

        node = target.get_bone_node(role)
        if node is None:
            _warn(warnings, src_name, WarningReason.TARGET_JOINT_MISSING,
                  f'Target bone "{role.value}" not found in humanoid for source joint "{src_name}"', log)
            continue

        rest = rest_poses.resolve(src_name)
        if rest is None:
            _warn(warnings, src_name, WarningReason.SOURCE_JOINT_MISSING,
                  f'Source joint "{src_name}" not found in source skeleton, skipping track "{track.name}"', log)
            continue

        jobs.append(_TrackJob(track, track.property_kind, node.name, rest[0], rest[1]))
    return jobs


def _retarget_track(job: _TrackJob, scale: float, convention: CoordinateConvention) -> AnimationTrack:
    if job.kind is PropertyKind.ROTATION:
        values = retarget_rotations(job.track.values, job.rest_rotation, job.parent_rest_rotation, convention)
    else:
        values = retarget_positions(job.track.values, scale, convention)
    return AnimationTrack(f"{job.target_node}.{job.kind.value}", job.track.times, values).frozen()


def _run_jobs(
    jobs: List[_TrackJob], scale: float, convention: CoordinateConvention, max_workers: Optional[int]
) -> List[AnimationTrack]:
    if not max_workers or max_workers <= 1 or len(jobs) < 2:
        return [_retarget_track(job, scale, convention) for job in jobs]
    with ThreadPoolExecutor(max_workers=min(len(jobs), max_workers)) as executor:
        # map() yields in submission order, so track order is preserved
        return list(executor.map(lambda job: _retarget_track(job, scale, convention), jobs))


def retarget_animation(
    source: SourceAsset,
    target: TargetRig,
    options: Optional[RetargetingOptions] = None,
) -> RetargetResult:
    """
    Retarget the named clip of `source` onto `target`.

    Never raises: a missing clip, undefined hips scaling or any error while
    transforming tracks yields a result without a clip and with the failure
    reason set. Tracks whose joint cannot be mapped are dropped and reported
    as warnings.
    """
    if options is None:
        options = RetargetingOptions()
    log = options.log_warnings
    warnings: List[RetargetWarning] = []

    try:
        clip = _locate_clip(source, options.animation_clip_name)
        bone_map = BoneMap(options.custom_bone_map)
        scale = _resolve_scale(source.skeleton, target, bone_map)

        jobs = _plan_tracks(clip, bone_map, target, RestPoseResolver(source.skeleton), warnings, log)
        tracks = _run_jobs(jobs, scale, target.convention, options.max_workers)
        result_clip = assemble_clip(options.output_clip_name, clip.duration, tracks)
    except RetargetError as e:
        if log:
            logger.warning("[Retarget] %s", e)
        return RetargetResult(failure=e.reason, message=str(e), warnings=tuple(warnings))
    except Exception as e:
        if log:
            logger.exception("[Retarget] Failed to retarget animation: %s", e)
        return RetargetResult(
            failure=FailureReason.INTERNAL_FAULT,
            message=f"{type(e).__name__}: {e}",
            warnings=tuple(warnings),
        )

    logger.debug(
        "[Retarget] Retargeted %d/%d tracks of '%s' into '%s'",
        len(result_clip.tracks), len(clip.tracks), clip.name, result_clip.name,
    )
    return RetargetResult(clip=result_clip, warnings=tuple(warnings))

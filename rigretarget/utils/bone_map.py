from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Union

from .presets import MIXAMO_VRM_RIG_MAP, HumanBone

BoneRole = Union[HumanBone, str]


def _as_role(value: BoneRole, source_name: str) -> HumanBone:
    try:
        return HumanBone(value)
    except ValueError:
        raise ValueError(f"Unknown humanoid bone '{value}' for source joint '{source_name}'") from None


class BoneMap:
    """
    Source joint name -> humanoid bone role.

    The default Mixamo table is overlaid key by key with `overrides`;
    override entries win. Names missing from the merged table are simply
    not mapped.
    """

    def __init__(
        self,
        overrides: Optional[Mapping[str, BoneRole]] = None,
        defaults: Mapping[str, HumanBone] = MIXAMO_VRM_RIG_MAP,
    ):
        merged: Dict[str, HumanBone] = dict(defaults)
        for source_name, role in (overrides or {}).items():
            merged[source_name] = _as_role(role, source_name)
        self._table = MappingProxyType(merged)

    def resolve(self, source_joint_name: str) -> Optional[HumanBone]:
        return self._table.get(source_joint_name)

    def source_names_for(self, role: BoneRole) -> List[str]:
        role = HumanBone(role)
        return [name for name, r in self._table.items() if r is role]

    def as_dict(self) -> Dict[str, HumanBone]:
        return dict(self._table)

    def __contains__(self, source_joint_name) -> bool:
        return source_joint_name in self._table

    def __len__(self) -> int:
        return len(self._table)

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)


def resolve_bone(source_joint_name: str, overrides: Optional[Mapping[str, BoneRole]] = None) -> Optional[HumanBone]:
    """One-shot lookup against the default table merged with `overrides`."""
    return BoneMap(overrides).resolve(source_joint_name)

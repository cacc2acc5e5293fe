"""
Bone vocabularies and default tables used by the retargeter.
"""
from enum import Enum
from types import MappingProxyType

# =============================================================================
# Defaults
# =============================================================================

# Clip name Mixamo writes into its FBX exports
DEFAULT_CLIP_NAME = "mixamo.com"
DEFAULT_OUTPUT_CLIP_NAME = "vrmAnimation"


class HumanBone(str, Enum):
    """Canonical humanoid bone roles (VRM humanoid vocabulary)."""

    HIPS = "hips"
    SPINE = "spine"
    CHEST = "chest"
    UPPER_CHEST = "upperChest"
    NECK = "neck"
    HEAD = "head"
    LEFT_EYE = "leftEye"
    RIGHT_EYE = "rightEye"
    JAW = "jaw"

    LEFT_UPPER_LEG = "leftUpperLeg"
    LEFT_LOWER_LEG = "leftLowerLeg"
    LEFT_FOOT = "leftFoot"
    LEFT_TOES = "leftToes"
    RIGHT_UPPER_LEG = "rightUpperLeg"
    RIGHT_LOWER_LEG = "rightLowerLeg"
    RIGHT_FOOT = "rightFoot"
    RIGHT_TOES = "rightToes"

    LEFT_SHOULDER = "leftShoulder"
    LEFT_UPPER_ARM = "leftUpperArm"
    LEFT_LOWER_ARM = "leftLowerArm"
    LEFT_HAND = "leftHand"
    RIGHT_SHOULDER = "rightShoulder"
    RIGHT_UPPER_ARM = "rightUpperArm"
    RIGHT_LOWER_ARM = "rightLowerArm"
    RIGHT_HAND = "rightHand"

    LEFT_THUMB_METACARPAL = "leftThumbMetacarpal"
    LEFT_THUMB_PROXIMAL = "leftThumbProximal"
    LEFT_THUMB_DISTAL = "leftThumbDistal"
    LEFT_INDEX_PROXIMAL = "leftIndexProximal"
    LEFT_INDEX_INTERMEDIATE = "leftIndexIntermediate"
    LEFT_INDEX_DISTAL = "leftIndexDistal"
    LEFT_MIDDLE_PROXIMAL = "leftMiddleProximal"
    LEFT_MIDDLE_INTERMEDIATE = "leftMiddleIntermediate"
    LEFT_MIDDLE_DISTAL = "leftMiddleDistal"
    LEFT_RING_PROXIMAL = "leftRingProximal"
    LEFT_RING_INTERMEDIATE = "leftRingIntermediate"
    LEFT_RING_DISTAL = "leftRingDistal"
    LEFT_LITTLE_PROXIMAL = "leftLittleProximal"
    LEFT_LITTLE_INTERMEDIATE = "leftLittleIntermediate"
    LEFT_LITTLE_DISTAL = "leftLittleDistal"

    RIGHT_THUMB_METACARPAL = "rightThumbMetacarpal"
    RIGHT_THUMB_PROXIMAL = "rightThumbProximal"
    RIGHT_THUMB_DISTAL = "rightThumbDistal"
    RIGHT_INDEX_PROXIMAL = "rightIndexProximal"
    RIGHT_INDEX_INTERMEDIATE = "rightIndexIntermediate"
    RIGHT_INDEX_DISTAL = "rightIndexDistal"
    RIGHT_MIDDLE_PROXIMAL = "rightMiddleProximal"
    RIGHT_MIDDLE_INTERMEDIATE = "rightMiddleIntermediate"
    RIGHT_MIDDLE_DISTAL = "rightMiddleDistal"
    RIGHT_RING_PROXIMAL = "rightRingProximal"
    RIGHT_RING_INTERMEDIATE = "rightRingIntermediate"
    RIGHT_RING_DISTAL = "rightRingDistal"
    RIGHT_LITTLE_PROXIMAL = "rightLittleProximal"
    RIGHT_LITTLE_INTERMEDIATE = "rightLittleIntermediate"
    RIGHT_LITTLE_DISTAL = "rightLittleDistal"

    def __str__(self) -> str:
        return self.value


# Mixamo rig joint name -> humanoid bone role
MIXAMO_VRM_RIG_MAP = MappingProxyType({
    "mixamorigHips": HumanBone.HIPS,
    "mixamorigSpine": HumanBone.SPINE,
    "mixamorigSpine1": HumanBone.CHEST,
    "mixamorigSpine2": HumanBone.UPPER_CHEST,
    "mixamorigNeck": HumanBone.NECK,
    "mixamorigHead": HumanBone.HEAD,
    # Left arm
    "mixamorigLeftShoulder": HumanBone.LEFT_SHOULDER,
    "mixamorigLeftArm": HumanBone.LEFT_UPPER_ARM,
    "mixamorigLeftForeArm": HumanBone.LEFT_LOWER_ARM,
    "mixamorigLeftHand": HumanBone.LEFT_HAND,
    "mixamorigLeftHandThumb1": HumanBone.LEFT_THUMB_METACARPAL,
    "mixamorigLeftHandThumb2": HumanBone.LEFT_THUMB_PROXIMAL,
    "mixamorigLeftHandThumb3": HumanBone.LEFT_THUMB_DISTAL,
    "mixamorigLeftHandIndex1": HumanBone.LEFT_INDEX_PROXIMAL,
    "mixamorigLeftHandIndex2": HumanBone.LEFT_INDEX_INTERMEDIATE,
    "mixamorigLeftHandIndex3": HumanBone.LEFT_INDEX_DISTAL,
    "mixamorigLeftHandMiddle1": HumanBone.LEFT_MIDDLE_PROXIMAL,
    "mixamorigLeftHandMiddle2": HumanBone.LEFT_MIDDLE_INTERMEDIATE,
    "mixamorigLeftHandMiddle3": HumanBone.LEFT_MIDDLE_DISTAL,
    "mixamorigLeftHandRing1": HumanBone.LEFT_RING_PROXIMAL,
    "mixamorigLeftHandRing2": HumanBone.LEFT_RING_INTERMEDIATE,
    "mixamorigLeftHandRing3": HumanBone.LEFT_RING_DISTAL,
    "mixamorigLeftHandPinky1": HumanBone.LEFT_LITTLE_PROXIMAL,
    "mixamorigLeftHandPinky2": HumanBone.LEFT_LITTLE_INTERMEDIATE,
    "mixamorigLeftHandPinky3": HumanBone.LEFT_LITTLE_DISTAL,
    # Right arm
    "mixamorigRightShoulder": HumanBone.RIGHT_SHOULDER,
    "mixamorigRightArm": HumanBone.RIGHT_UPPER_ARM,
    "mixamorigRightForeArm": HumanBone.RIGHT_LOWER_ARM,
    "mixamorigRightHand": HumanBone.RIGHT_HAND,
    "mixamorigRightHandPinky1": HumanBone.RIGHT_LITTLE_PROXIMAL,
    "mixamorigRightHandPinky2": HumanBone.RIGHT_LITTLE_INTERMEDIATE,
    "mixamorigRightHandPinky3": HumanBone.RIGHT_LITTLE_DISTAL,
    "mixamorigRightHandRing1": HumanBone.RIGHT_RING_PROXIMAL,
    "mixamorigRightHandRing2": HumanBone.RIGHT_RING_INTERMEDIATE,
    "mixamorigRightHandRing3": HumanBone.RIGHT_RING_DISTAL,
    "mixamorigRightHandMiddle1": HumanBone.RIGHT_MIDDLE_PROXIMAL,
    "mixamorigRightHandMiddle2": HumanBone.RIGHT_MIDDLE_INTERMEDIATE,
    "mixamorigRightHandMiddle3": HumanBone.RIGHT_MIDDLE_DISTAL,
    "mixamorigRightHandIndex1": HumanBone.RIGHT_INDEX_PROXIMAL,
    "mixamorigRightHandIndex2": HumanBone.RIGHT_INDEX_INTERMEDIATE,
    "mixamorigRightHandIndex3": HumanBone.RIGHT_INDEX_DISTAL,
    "mixamorigRightHandThumb1": HumanBone.RIGHT_THUMB_METACARPAL,
    "mixamorigRightHandThumb2": HumanBone.RIGHT_THUMB_PROXIMAL,
    "mixamorigRightHandThumb3": HumanBone.RIGHT_THUMB_DISTAL,
    # Legs
    "mixamorigLeftUpLeg": HumanBone.LEFT_UPPER_LEG,
    "mixamorigLeftLeg": HumanBone.LEFT_LOWER_LEG,
    "mixamorigLeftFoot": HumanBone.LEFT_FOOT,
    "mixamorigLeftToeBase": HumanBone.LEFT_TOES,
    "mixamorigRightUpLeg": HumanBone.RIGHT_UPPER_LEG,
    "mixamorigRightLeg": HumanBone.RIGHT_LOWER_LEG,
    "mixamorigRightFoot": HumanBone.RIGHT_FOOT,
    "mixamorigRightToeBase": HumanBone.RIGHT_TOES,
})

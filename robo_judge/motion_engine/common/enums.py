# robo_judge/motion_engine/common/enums.py
from enum import Enum

class Joint(str, Enum):
    """Anatomical joint identifiers used to key a Skeleton."""
    NOSE = "NOSE"
    LEFT_SHOULDER = "LEFT_SHOULDER"
    RIGHT_SHOULDER = "RIGHT_SHOULDER"
    LEFT_ELBOW = "LEFT_ELBOW"
    RIGHT_ELBOW = "RIGHT_ELBOW"
    LEFT_WRIST = "LEFT_WRIST"
    RIGHT_WRIST = "RIGHT_WRIST"
    LEFT_HIP = "LEFT_HIP"
    RIGHT_HIP = "RIGHT_HIP"
    LEFT_KNEE = "LEFT_KNEE"
    RIGHT_KNEE = "RIGHT_KNEE"
    LEFT_ANKLE = "LEFT_ANKLE"
    RIGHT_ANKLE = "RIGHT_ANKLE"
    LEFT_HEEL = "LEFT_HEEL"
    RIGHT_HEEL = "RIGHT_HEEL"
    LEFT_FOOT_INDEX = "LEFT_FOOT_INDEX"
    RIGHT_FOOT_INDEX = "RIGHT_FOOT_INDEX"

class SessionState(str, Enum):
    """Defines what the engine could derive from the latest frame."""
    SEARCHING = "SEARCHING"
    PARTIAL = "PARTIAL"
    JUDGING = "JUDGING"

class TrackerStatus(str, Enum):
    UNINITIALIZED = "UNINITIALIZED"
    TRACKING = "TRACKING"

class LogLevel(str, Enum):
    """Defines logging levels accepted in the configuration file."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"

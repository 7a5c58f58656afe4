"""Error taxonomy shared by the three engines.

Each engine has its own numeric code space (the values are part of the call
interface and overlap between engines).  Every code carries the category it
belongs to so callers can react to a class of failure without knowing the
individual codes.
"""

from enum import Enum, IntEnum


class ErrorCategory(str, Enum):
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not-found"
    CAPACITY = "capacity"
    VALIDATION = "validation"
    STATE_CONFLICT = "state-conflict"
    TEMPORAL = "temporal"
    INSUFFICIENT_RESOURCE = "insufficient-resource"


class ErrorCode(IntEnum):
    """Base for per-engine error enums.  Members are ``(value, category)``."""

    def __new__(cls, value: int, category: ErrorCategory):
        obj = int.__new__(cls, value)
        obj._value_ = value
        obj.category = category
        return obj


class BindingError(ErrorCode):
    NULL_PRINCIPAL = (150, ErrorCategory.VALIDATION)
    ALREADY_BOUND = (151, ErrorCategory.STATE_CONFLICT)


class BatchError(ErrorCode):
    NOT_AUTHORIZED = (100, ErrorCategory.AUTHORIZATION)
    BATCH_NOT_FOUND = (102, ErrorCategory.NOT_FOUND)
    INVALID_TEMP = (103, ErrorCategory.VALIDATION)
    INVALID_FEE = (104, ErrorCategory.VALIDATION)
    INVALID_VACCINE_TYPE = (110, ErrorCategory.VALIDATION)
    INVALID_DOSE_COUNT = (111, ErrorCategory.VALIDATION)
    INVALID_PRODUCTION_DATE = (112, ErrorCategory.TEMPORAL)
    INVALID_EXPIRATION_DATE = (113, ErrorCategory.TEMPORAL)
    INVALID_MANUFACTURER = (114, ErrorCategory.VALIDATION)
    INVALID_TRANSPORT_MODE = (116, ErrorCategory.VALIDATION)
    INVALID_STATUS = (117, ErrorCategory.VALIDATION)
    INVALID_LOCATION = (118, ErrorCategory.VALIDATION)
    ALREADY_COMPROMISED = (119, ErrorCategory.STATE_CONFLICT)
    MAX_BATCHES_EXCEEDED = (120, ErrorCategory.CAPACITY)
    INSUFFICIENT_FUNDS = (121, ErrorCategory.INSUFFICIENT_RESOURCE)
    INVALID_RECIPIENT = (122, ErrorCategory.VALIDATION)


class AlertError(ErrorCode):
    NOT_AUTHORIZED = (100, ErrorCategory.AUTHORIZATION)
    INVALID_BATCH_ID = (101, ErrorCategory.VALIDATION)
    INVALID_TEMP = (102, ErrorCategory.VALIDATION)
    INVALID_MIN_TEMP = (103, ErrorCategory.VALIDATION)
    INVALID_MAX_TEMP = (104, ErrorCategory.VALIDATION)
    INVALID_THRESHOLD = (105, ErrorCategory.VALIDATION)
    ALERT_NOT_FOUND = (107, ErrorCategory.NOT_FOUND)
    INVALID_FEE = (108, ErrorCategory.VALIDATION)
    BATCH_NOT_ACTIVE = (112, ErrorCategory.STATE_CONFLICT)
    MAX_ALERTS_EXCEEDED = (114, ErrorCategory.CAPACITY)
    INVALID_ALERT_TYPE = (115, ErrorCategory.VALIDATION)
    INVALID_SEVERITY = (116, ErrorCategory.VALIDATION)
    INVALID_GRACE_PERIOD = (117, ErrorCategory.VALIDATION)
    INVALID_LOCATION = (118, ErrorCategory.VALIDATION)
    INVALID_SENSOR_ID = (119, ErrorCategory.VALIDATION)
    ALERT_ALREADY_RESOLVED = (120, ErrorCategory.STATE_CONFLICT)
    INSUFFICIENT_FUNDS = (121, ErrorCategory.INSUFFICIENT_RESOURCE)


class IncentiveError(ErrorCode):
    NOT_AUTHORIZED = (100, ErrorCategory.AUTHORIZATION)
    INVALID_BATCH_ID = (101, ErrorCategory.VALIDATION)
    STAKE_NOT_FOUND = (102, ErrorCategory.NOT_FOUND)
    INSUFFICIENT_BALANCE = (103, ErrorCategory.INSUFFICIENT_RESOURCE)
    INVALID_AMOUNT = (104, ErrorCategory.VALIDATION)
    STAKE_LOCKED = (105, ErrorCategory.TEMPORAL)
    INVALID_PENALTY = (106, ErrorCategory.VALIDATION)
    SUPPLY_ALREADY_MINTED = (107, ErrorCategory.STATE_CONFLICT)
    INVALID_RATE = (108, ErrorCategory.VALIDATION)
    MAX_STAKES_EXCEEDED = (113, ErrorCategory.CAPACITY)
    INVALID_ROLE = (114, ErrorCategory.VALIDATION)
    REWARD_ALREADY_CLAIMED = (115, ErrorCategory.STATE_CONFLICT)
    INSUFFICIENT_REWARDS = (118, ErrorCategory.INSUFFICIENT_RESOURCE)

"""Temperature rules and alert records."""

from dataclasses import dataclass
from enum import Enum

MIN_TEMP = -50
MAX_TEMP = 50
MAX_GRACE_PERIOD = 144  # blocks
MAX_SEVERITY = 3
MAX_SENSOR_ID_LEN = 50
MAX_LOCATION_LEN = 100


class AlertType(str, Enum):
    HIGH = "high"
    LOW = "low"
    EXTREME = "extreme"


@dataclass(frozen=True)
class BatchRules:
    min_temp: int
    max_temp: int
    deviation_threshold: int
    grace_period: int
    active: bool = True

    def within_range(self, temp: int) -> bool:
        return self.min_temp <= temp <= self.max_temp


@dataclass(frozen=True)
class Alert:
    alert_id: int
    batch_id: int
    temp_recorded: int
    timestamp: int
    sensor_id: str
    location: str
    severity: int
    alert_type: AlertType
    status: bool = True  # True while open
    penalty_applied: bool = False

"""Batch records held by the registry."""

from dataclasses import dataclass
from enum import Enum

from coldchain_ledger.common.context import Principal

MAX_VACCINE_TYPE_LEN = 50
MAX_MANUFACTURER_LEN = 100
MAX_LOCATION_LEN = 100
MIN_STORAGE_TEMP = -50
MAX_STORAGE_TEMP = 50


class TransportMode(str, Enum):
    AIR = "air"
    SEA = "sea"
    ROAD = "road"
    RAIL = "rail"


class BatchStatus(str, Enum):
    PRODUCED = "produced"
    IN_TRANSIT = "in-transit"
    DELIVERED = "delivered"
    COMPROMISED = "compromised"


@dataclass(frozen=True)
class BatchMetadata:
    vaccine_type: str
    dose_count: int
    production_date: int
    expiration_date: int
    manufacturer: str
    storage_min: int
    storage_max: int
    transport_mode: TransportMode
    origin: str
    destination: str
    status: BatchStatus = BatchStatus.PRODUCED
    compromised: bool = False


@dataclass(frozen=True)
class Batch:
    batch_id: int
    owner: Principal
    metadata: BatchMetadata

from enum import Enum


class ServiceStatus(str, Enum):
    pending = "pending"
    active = "active"
    inactive = "inactive"


class EventStatus(str, Enum):
    upcoming = "upcoming"
    ongoing = "ongoing"
    completed = "completed"
    cancelled = "cancelled"


class LocationType(str, Enum):
    in_person = "in_person"
    virtual = "virtual"
    hybrid = "hybrid"


class TokenType(str, Enum):
    provider = "provider"
    admin = "admin"


DEFAULT_SERVICE_STATUSES = frozenset({ServiceStatus.active.value})
DEFAULT_EVENT_STATUSES = frozenset({EventStatus.upcoming.value, EventStatus.ongoing.value})

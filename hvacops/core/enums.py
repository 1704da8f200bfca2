from enum import Enum


class OrderLifecycle(str, Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"

    def __str__(self):
        return self.value


class OrderStatus(str, Enum):
    """Kanban column an order is shown in."""
    RECEIVED = "received"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    SETTLED = "settled"
    CANCELLED = "cancelled"

    def __str__(self):
        return self.value


class DeliveryStatus(str, Enum):
    PENDING = "pending"
    IN_TRANSIT = "in-transit"
    DELIVERED = "delivered"

    def __str__(self):
        return self.value


class ItemDeliveryStatus(str, Enum):
    NONE = "none"
    ORDERED = "ordered"
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"

    def __str__(self):
        return self.value


class AlertType(str, Enum):
    DELAYED = "delayed"
    TODAY = "today"
    TOMORROW = "tomorrow"
    NONE = "none"

    def __str__(self):
        return self.value


class SettlementStatus(str, Enum):
    UNSETTLED = "unsettled"
    IN_PROGRESS = "in-progress"
    SETTLED = "settled"

    def __str__(self):
        return self.value


class InstallScheduleStatus(str, Enum):
    UNSCHEDULED = "unscheduled"
    SCHEDULED = "scheduled"
    COMPLETED = "completed"

    def __str__(self):
        return self.value


class ScheduleUrgency(str, Enum):
    OVERDUE = "overdue"
    TODAY = "today"
    TOMORROW = "tomorrow"
    NO_EQUIPMENT = "no-equipment"
    NONE = "none"

    def __str__(self):
        return self.value


class EquipmentStatusType(str, Enum):
    NOT_APPLICABLE = "not-applicable"
    NO_ITEMS = "no-items"
    PARTIAL = "partial"
    ALL_DELIVERED = "all-delivered"

    def __str__(self):
        return self.value


class WorkType(str, Enum):
    NEW_INSTALL = "신규설치"
    RELOCATION = "이전설치"
    REMOVAL_STORAGE = "철거보관"
    REMOVAL_DISPOSAL = "철거폐기"

    def __str__(self):
        return self.value


class ASStatus(str, Enum):
    """After-sales request steps: received, in progress, awaiting settlement, settled."""
    RECEIVED = "received"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    SETTLED = "settled"

    def __str__(self):
        return self.value


class StoredEquipmentStatus(str, Enum):
    STORED = "stored"
    RELEASED = "released"

    def __str__(self):
        return self.value


class EquipmentCondition(str, Enum):
    GOOD = "good"
    POOR = "poor"

    def __str__(self):
        return self.value


class ReleaseType(str, Enum):
    REINSTALL = "reinstall"
    DISPOSE = "dispose"

    def __str__(self):
        return self.value

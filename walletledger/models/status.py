import enum


class AccountStatus(str, enum.Enum):
    active = "ACTIVE"
    blocked = "BLOCKED"

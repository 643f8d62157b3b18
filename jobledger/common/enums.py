import enum


class ProfileRole(str, enum.Enum):
    CLIENT = "client"
    CONTRACTOR = "contractor"


class ContractStatus(str, enum.Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    TERMINATED = "terminated"


class ErrorKind(str, enum.Enum):
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    INVALID_INPUT = "invalid_input"
    INTEGRITY = "integrity"
    UNAUTHENTICATED = "unauthenticated"
    UNAVAILABLE = "unavailable"

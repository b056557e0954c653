import enum


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    SUPERVISOR = "supervisor"


class DecapingMethod(str, enum.Enum):
    TRANSPORT = "transport"
    POUSSAGE = "poussage"
    CASEMENT = "casement"


class MachineState(str, enum.Enum):
    RUNNING = "running"
    STOPPED = "stopped"


class MachineType(str, enum.Enum):
    D11 = "d11"
    M750011 = "750011"
    M750012 = "750012"
    PH1 = "ph1"
    PH2 = "ph2"
    M200B1 = "200b1"
    LIBHERE = "libhere"
    TRANSWINE = "transwine"
    PROCANEQ = "procaneq"

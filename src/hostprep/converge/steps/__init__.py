from .precheck import PrivilegeCheck
from .network import NetworkStep
from .hosts import HostsEntryStep
from .packages import PackagesStep
from .services import ServicesStep
from .users import UsersStep
from .privileged import PrivilegedGrantStep

__all__ = [
    "PrivilegeCheck",
    "NetworkStep",
    "HostsEntryStep",
    "PackagesStep",
    "ServicesStep",
    "UsersStep",
    "PrivilegedGrantStep",
]

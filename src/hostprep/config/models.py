# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostprep/config/models.py

from __future__ import annotations

import ipaddress
import re
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

_USERNAME_RE = re.compile(r"^[a-z_][a-z0-9_-]*\$?$")

DEFAULT_USERS: List[str] = [
    "dennis",
    "aubrey",
    "captain",
    "snibbles",
    "brownie",
    "scooter",
    "sandy",
    "perrier",
    "cindy",
    "tiger",
    "yoda",
]

DEFAULT_EXTRA_KEY = (
    "ssh-ed25519 AAAAC3NzaC1lZDI1NTE5AAAAIG4rT3vTt99Ox5kndS4HmgTrKBT8SKzhK4rhGkEVGlCI "
    "student@generic-vm"
)


def _check_username(value: str) -> str:
    if len(value) > 32 or not _USERNAME_RE.match(value):
        raise ValueError(f"invalid username {value!r}")
    return value


class NetworkSpec(BaseModel):
    """Static IPv4 configuration written to the first netplan file found."""

    interface: str = "eth0"
    address: str = "192.168.16.21"
    prefix: int = Field(24, ge=1, le=32)
    gateway: str = "192.168.16.2"
    search_dir: str = "/etc/netplan"
    pattern: str = "*.yaml"
    write_mode: int = 0o600      # while the file is being rewritten
    final_mode: int = 0o644

    @field_validator("address", "gateway")
    @classmethod
    def check_ipv4(cls, v: str) -> str:
        ipaddress.IPv4Address(v)
        return v

    @property
    def cidr(self) -> str:
        return f"{self.address}/{self.prefix}"


class HostsEntrySpec(BaseModel):
    ip: str = "192.168.16.21"
    hostname: str = "server1"
    path: str = "/etc/hosts"

    @field_validator("ip")
    @classmethod
    def check_ip(cls, v: str) -> str:
        ipaddress.ip_address(v)
        return v

    @field_validator("hostname")
    @classmethod
    def check_hostname(cls, v: str) -> str:
        if not v or any(c.isspace() for c in v):
            raise ValueError("hostname must be a non-empty token")
        return v

    @property
    def line(self) -> str:
        return f"{self.ip} {self.hostname}"


class KeySpec(BaseModel):
    algorithm: Literal["rsa", "ed25519"]
    bits: Optional[int] = None   # only meaningful for rsa
    filename: str

    @property
    def public_filename(self) -> str:
        return f"{self.filename}.pub"


def _default_keys() -> List[KeySpec]:
    return [
        KeySpec(algorithm="rsa", bits=4096, filename="id_rsa"),
        KeySpec(algorithm="ed25519", filename="id_ed25519"),
    ]


class UserSpec(BaseModel):
    """
    A local account. home defaults to /home/<name>.
    """
    name: str
    home: Optional[str] = None
    shell: str = "/bin/bash"
    keys: List[KeySpec] = Field(default_factory=_default_keys)

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return _check_username(v)

    @property
    def home_dir(self) -> str:
        return self.home or f"/home/{self.name}"

    @property
    def ssh_dir(self) -> str:
        return f"{self.home_dir.rstrip('/')}/.ssh"

    @property
    def authorized_keys(self) -> str:
        return f"{self.ssh_dir}/authorized_keys"


class PrivilegedGrantSpec(BaseModel):
    username: str = "dennis"
    group: str = "sudo"
    extra_key: str = DEFAULT_EXTRA_KEY
    # Off by default: the extra key is appended on every run.
    dedupe_extra_key: bool = False

    @field_validator("username")
    @classmethod
    def check_username(cls, v: str) -> str:
        return _check_username(v)


class HostConfig(BaseModel):
    network: NetworkSpec = Field(default_factory=NetworkSpec)
    hosts_entry: HostsEntrySpec = Field(default_factory=HostsEntrySpec)
    packages: List[str] = Field(default_factory=lambda: ["apache2", "squid"])
    services: List[str] = Field(default_factory=lambda: ["apache2", "squid"])
    users: List[UserSpec] = Field(
        default_factory=lambda: [UserSpec(name=n) for n in DEFAULT_USERS]
    )
    privileged: PrivilegedGrantSpec = Field(default_factory=PrivilegedGrantSpec)

    @field_validator("users", mode="before")
    @classmethod
    def users_from_names(cls, v):
        # accept a plain list of usernames as shorthand
        if isinstance(v, list):
            return [{"name": u} if isinstance(u, str) else u for u in v]
        return v

    @model_validator(mode="after")
    def check_unique_users(self) -> "HostConfig":
        seen = set()
        for u in self.users:
            if u.name in seen:
                raise ValueError(f"duplicate user {u.name!r}")
            seen.add(u.name)
        return self

    # Helper method
    def by_name(self) -> dict[str, UserSpec]:
        return {u.name: u for u in self.users}

# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostprep/converge/steps/network.py

from __future__ import annotations

import logging
from typing import Optional

from hostprep.config.models import HostConfig, NetworkSpec
from hostprep.converge.models import Outcome, StepResult
from hostprep.converge.template_renderer import TemplateRenderer
from hostprep.errors import CommandError, ExternalToolFailure, PrecheckFailure
from hostprep.host.interface import Host

log = logging.getLogger("hostprep")


def render_netplan(spec: NetworkSpec, renderer: Optional[TemplateRenderer] = None) -> str:
    renderer = renderer or TemplateRenderer()
    return renderer.render(
        "netplan.yaml.j2",
        {
            "interface": spec.interface,
            "cidr": spec.cidr,
            "gateway": spec.gateway,
        },
    )


def find_netplan_file(host: Host, spec: NetworkSpec) -> str:
    matches = host.glob(spec.search_dir, spec.pattern)
    if not matches:
        raise PrecheckFailure(
            f"No Netplan configuration file found in {spec.search_dir.rstrip('/')}/"
        )
    return matches[0]


class NetworkStep:
    """
    Static address for one interface.

    The whole file is replaced by the template, so anything else configured in
    it is lost. The address check is a plain substring match on
    ``<address>/<prefix>``.
    """

    name = "network"

    def __init__(self, renderer: Optional[TemplateRenderer] = None):
        self.renderer = renderer

    def ensure(self, host: Host, cfg: HostConfig) -> StepResult:
        spec = cfg.network
        path = find_netplan_file(host, spec)

        if spec.cidr in host.read_text(path):
            log.info("Netplan configuration is already set.")
            return StepResult(self.name, Outcome.SATISFIED, f"{path} already has {spec.cidr}")

        log.info("Updating Netplan configuration in %s.", path)
        content = render_netplan(spec, self.renderer)
        host.chmod(path, spec.write_mode)
        host.write_text(path, content)
        host.chmod(path, spec.final_mode)

        try:
            host.run(["netplan", "apply"])
        except CommandError as e:
            raise ExternalToolFailure("Failed to apply Netplan configuration.") from e

        return StepResult(self.name, Outcome.APPLIED, f"wrote {path} and applied", changes=[path])

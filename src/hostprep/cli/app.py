# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostprep/cli/app.py
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import paramiko
import typer
import yaml

from hostprep.config.loader import load_config
from hostprep.converge.executor import ConvergeReport, build_steps, converge, resolve_selection
from hostprep.errors import ProvisionError
from hostprep.host.local import LocalHost
from hostprep.host.ssh import SshHost, open_ssh
from hostprep.logging.log import init_logging
from hostprep.observers.console import ConsoleObserver
from hostprep.observers.events import new_ctx
from hostprep.observers.jsonfile import JsonFileObserver
from hostprep.observers.logger import LoggerObserver


# ------------------------------------------------------------------------------
# CLI setup
# ------------------------------------------------------------------------------

app = typer.Typer(help="Converge a host to its provisioning baseline")


def _fail(message: str) -> None:
    typer.secho(f"[ERROR] {message}", err=True, fg=typer.colors.RED)
    raise typer.Exit(code=1)


def _connect_target(
    host: Optional[str],
    ssh_user: str,
    ssh_key: Optional[Path],
    ssh_password: Optional[str],
    port: int,
):
    if not host:
        return LocalHost()
    try:
        client = open_ssh(
            host,
            username=ssh_user,
            port=port,
            pkey_path=ssh_key,
            password=ssh_password,
        )
    except (paramiko.SSHException, OSError, RuntimeError) as e:
        _fail(f"Failed to SSH into {host} as '{ssh_user}': {e}")
    return SshHost(client, address=host, username=ssh_user)


# ------------------------------------------------------------------------------
# apply
# ------------------------------------------------------------------------------

@app.command()
def apply(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Host definition YAML (defaults built in)"),
    only: Optional[str] = typer.Option(
        None,
        "--only",
        help="Steps to run: network,hosts,packages,services,users,privileged or all",
    ),
    host: Optional[str] = typer.Option(None, "--host", help="Provision a remote host over SSH instead of this machine"),
    ssh_user: str = typer.Option("root", "--ssh-user"),
    ssh_key: Optional[Path] = typer.Option(None, "--ssh-key"),
    ssh_password: Optional[str] = typer.Option(None, "--ssh-password"),
    port: int = typer.Option(22, "--port"),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir"),
    events_file: Optional[Path] = typer.Option(None, "--events-file", help="Append lifecycle events as JSON lines"),
    show_events: bool = typer.Option(False, "--show-events", help="Echo lifecycle events to the console"),
    debug: bool = typer.Option(False, "--debug"),
):
    """Run every convergence step in order, stopping at the first failure."""
    try:
        names = resolve_selection(only)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--only")

    logger, run_id, log_path = init_logging(base_dir=log_dir, verbose=debug)

    try:
        cfg = load_config(config)
    except ProvisionError as e:
        _fail(str(e))

    target = _connect_target(host, ssh_user, ssh_key, ssh_password, port)

    observers: List = [LoggerObserver(logger)]
    if show_events:
        observers.append(ConsoleObserver())
    if events_file:
        observers.append(JsonFileObserver(events_file))

    report = ConvergeReport()
    try:
        converge(
            target,
            cfg,
            steps=build_steps(names),
            observers=observers,
            run_ctx=new_ctx(env=target.kind, context=target.address, run_id=run_id),
            report=report,
        )
    except (ProvisionError, OSError, UnicodeError, paramiko.SSHException) as e:
        logger.debug("run failed: %s", report.summary())
        _fail(str(e))
    finally:
        target.close()

    logger.info("Script execution completed successfully.")
    typer.echo(report.summary())


# ------------------------------------------------------------------------------
# show-config
# ------------------------------------------------------------------------------

@app.command("show-config")
def show_config(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Host definition YAML"),
):
    """Print the effective desired state as YAML."""
    try:
        cfg = load_config(config)
    except ProvisionError as e:
        _fail(str(e))
    typer.echo(yaml.safe_dump(cfg.model_dump(mode="json"), sort_keys=False))


def main() -> None:
    app()


if __name__ == "__main__":
    main()

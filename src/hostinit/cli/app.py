# src/hostinit/cli/app.py
from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional

import typer

from hostinit.config.loader import load_config
from hostinit.deploy.models import Step
from hostinit.deploy.orchestrator import run_steps
from hostinit.errors import FatalError
from hostinit.installers import codeserver as codeserver_installer
from hostinit.installers import docker as docker_installer
from hostinit.installers import init as init_installer
from hostinit.logging.log import init_logging
from hostinit.observers.logger import LoggerObserver
from hostinit.probe.capabilities import probe
from hostinit.utils.execution import build_context
from hostinit.utils.identity import (
    TargetIdentity,
    resolve_invoking_identity,
    resolve_target_identity,
)


# ------------------------------------------------------------------------------
# CLI setup
# ------------------------------------------------------------------------------

app = typer.Typer(help="Bring a fresh RHEL-family host to a known-good state")

ConfigOpt = typer.Option(None, "--config", help="YAML file overriding the packaged defaults")
VerboseOpt = typer.Option(False, "--verbose", "-v", help="Log every command on the console")


def _run_installer(
    installer: str,
    steps: List[Step],
    resolve_identity: Callable[[object], TargetIdentity],
    config_path: Optional[Path],
    verbose: bool,
) -> None:
    logger = None
    try:
        cfg = load_config(config_path)
        logger, run_id, _ = init_logging(base_dir=cfg.paths.log_dir, installer=installer, verbose=verbose)
        identity = resolve_identity(cfg)
        ctx = build_context(probe(), identity, cfg)
    except FatalError as e:
        if logger is None:
            logger, run_id, _ = init_logging(installer=installer, verbose=verbose)
        logger.error("%s", e)
        raise typer.Exit(code=1)

    report = run_steps(
        steps,
        ctx,
        installer=installer,
        observers=[LoggerObserver(logger)],
        run_id=run_id,
    )
    raise typer.Exit(code=report.exit_code)


@app.command()
def init(
    username: Optional[str] = typer.Argument(None, help="Target user (INIT_USERNAME/USERNAME take precedence)"),
    config: Optional[Path] = ConfigOpt,
    verbose: bool = VerboseOpt,
) -> None:
    """
    Base initialisation: sudo, update units, repositories, toolchain,
    Python, yq/gum, SSH and firewall.
    """
    _run_installer(
        "init",
        init_installer.build_steps(),
        lambda cfg: resolve_target_identity(cfg.target_user or username, env={}),
        config,
        verbose,
    )


@app.command()
def docker(config: Optional[Path] = ConfigOpt, verbose: bool = VerboseOpt) -> None:
    """Install and configure Docker for the invoking user."""
    _run_installer("docker", docker_installer.build_steps(), lambda cfg: resolve_invoking_identity(), config, verbose)


@app.command()
def codeserver(config: Optional[Path] = ConfigOpt, verbose: bool = VerboseOpt) -> None:
    """Install code-server and run it as a service of the invoking user."""
    _run_installer(
        "codeserver",
        codeserver_installer.build_steps(),
        lambda cfg: resolve_invoking_identity(),
        config,
        verbose,
    )


if __name__ == "__main__":
    app()

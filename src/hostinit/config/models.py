# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostinit/config/models.py

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, HttpUrl, field_validator


class PathsConfig(BaseModel):
    """Every host path the installers touch. Tests point these at tmp dirs."""

    sudoers_dir: Path = Path("/etc/sudoers.d")
    repo_dir: Path = Path("/etc/yum.repos.d")
    updatedb_conf: Path = Path("/etc/updatedb.conf")
    pip_conf: Path = Path("/etc/pip.conf")
    profile_dir: Path = Path("/etc/profile.d")
    sshd_config: Path = Path("/etc/ssh/sshd_config")
    docker_daemon_json: Path = Path("/etc/docker/daemon.json")
    docker_repo_file: Path = Path("/etc/yum.repos.d/docker-ce.repo")
    systemd_dir: Path = Path("/etc/systemd/system")
    venv_dir: Path = Path("/opt/hostinit-venv")
    tools_dir: Path = Path("assets/tools")
    bin_dir: Path = Path("/usr/local/bin")
    os_release: Path = Path("/etc/os-release")
    log_dir: Optional[Path] = None


class MirrorConfig(BaseModel):
    repo_mirror: str = "https://mirrors.aliyun.com/rockylinux"
    skip_repo_mirror: bool = False
    pip_index_url: HttpUrl = Field(default="https://mirrors.aliyun.com/pypi/simple/", validate_default=True)
    docker_ce_repo_url: HttpUrl = Field(default="https://download.docker.com/linux/centos/docker-ce.repo", validate_default=True)
    code_server_install_url: HttpUrl = Field(default="https://code-server.dev/install.sh", validate_default=True)

    @property
    def pip_trusted_host(self) -> str:
        return self.pip_index_url.host or ""

    @field_validator("repo_mirror")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("repo_mirror must not be empty")
        return v.rstrip("/")


class DockerPolicy(BaseModel):
    package_alternatives: List[List[str]] = Field(default_factory=list)
    ce_packages: List[str] = Field(default_factory=list)
    repo_tools: List[str] = Field(default_factory=list)
    daemon: Dict[str, object] = Field(default_factory=dict)


class PolicyConfig(BaseModel):
    """What to install and toggle. Data only; the engine does not interpret it."""

    user_groups: List[str] = Field(default_factory=list)
    auto_update_units: List[str] = Field(default_factory=list)
    base_packages: List[str] = Field(default_factory=list)
    dev_group: str = "Development Tools"
    build_packages: List[str] = Field(default_factory=list)
    locate_alternatives: List[List[str]] = Field(default_factory=list)
    prune_paths: List[str] = Field(default_factory=list)
    python_packages: List[str] = Field(default_factory=list)
    pip_bootstrap: List[str] = Field(default_factory=list)
    pip_packages: List[str] = Field(default_factory=list)
    sshd_options: Dict[str, str] = Field(default_factory=dict)
    firewall_alternatives: List[List[str]] = Field(default_factory=list)
    yq_binary: str = "yq_linux_amd64"
    gum_rpm: str = "gum-0.17.0-1.x86_64.rpm"
    docker: DockerPolicy = Field(default_factory=DockerPolicy)


class HostInitConfig(BaseModel):
    target_user: Optional[str] = None
    paths: PathsConfig = Field(default_factory=PathsConfig)
    mirrors: MirrorConfig = Field(default_factory=MirrorConfig)
    policy: PolicyConfig = Field(default_factory=PolicyConfig)

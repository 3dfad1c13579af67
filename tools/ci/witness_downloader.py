#!/usr/bin/env python3
"""Download, cache and locate the witness release binary."""

from __future__ import annotations

import os
import platform
import shutil
import sys
import tarfile
import tempfile
import urllib.error
import urllib.request
from pathlib import Path
from typing import Callable, Mapping, Optional

import actions_core

DEFAULT_WITNESS_VERSION = "0.9.2"
RELEASE_BASE_URL = "https://github.com/in-toto/witness/releases/download"
WITNESS_BINARY = "witness"


class WitnessDownloadError(ValueError):
    def __init__(self, failure_class: str, message: str) -> None:
        self.failure_class = failure_class
        self.reason = message
        super().__init__(f"{failure_class}: {message}")


def release_os(system: Optional[str] = None) -> str:
    name = (system or sys.platform).lower()
    if name.startswith("win"):
        return "windows"
    if name == "darwin":
        return "darwin"
    return "linux"


def release_arch(machine: Optional[str] = None) -> str:
    name = (machine or platform.machine()).lower()
    if name in {"arm64", "aarch64"}:
        return "arm64"
    return "amd64"


def release_archive_name(version: str, os_name: str, arch: str) -> str:
    return f"witness_{version}_{os_name}_{arch}.tar.gz"


def release_url(version: str, os_name: str, arch: str) -> str:
    return f"{RELEASE_BASE_URL}/v{version}/{release_archive_name(version, os_name, arch)}"


def tool_cache_dir(version: str, arch: str, env: Optional[Mapping[str, str]] = None) -> Path:
    source = os.environ if env is None else env
    root = (source.get("RUNNER_TOOL_CACHE") or "").strip() or tempfile.gettempdir()
    return Path(root) / WITNESS_BINARY / version / arch


def _download(url: str, destination: Path) -> None:
    request = urllib.request.Request(url, headers={"User-Agent": "witness-run-action"})
    try:
        with urllib.request.urlopen(request) as response, destination.open("wb") as handle:
            shutil.copyfileobj(response, handle)
    except urllib.error.HTTPError as exc:
        raise WitnessDownloadError("witness_download_failed", f"download failed ({exc.code}) for {url}") from exc
    except urllib.error.URLError as exc:
        raise WitnessDownloadError("witness_download_failed", f"download failed for {url}: {exc}") from exc


def extract_witness(archive: Path, destination: Path) -> Path:
    try:
        with tarfile.open(archive, "r:gz") as bundle:
            member = next(
                (item for item in bundle.getmembers() if Path(item.name).name == WITNESS_BINARY and item.isfile()),
                None,
            )
            if member is None:
                raise WitnessDownloadError("witness_extract_failed", f"{WITNESS_BINARY} not found in {archive}")
            source = bundle.extractfile(member)
            if source is None:
                raise WitnessDownloadError("witness_extract_failed", f"unreadable archive member {member.name}")
            destination.mkdir(parents=True, exist_ok=True)
            target = destination / WITNESS_BINARY
            with source, target.open("wb") as handle:
                shutil.copyfileobj(source, handle)
    except tarfile.TarError as exc:
        raise WitnessDownloadError("witness_extract_failed", f"failed to extract {archive}: {exc}") from exc
    return target


def download_and_setup_witness(
    version: str = DEFAULT_WITNESS_VERSION,
    *,
    install_dir: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    download: Callable[[str, Path], None] = _download,
) -> Path:
    """Return the witness executable path, downloading it into the tool cache when missing."""
    version = version.strip().lstrip("v") or DEFAULT_WITNESS_VERSION
    os_name = release_os()
    arch = release_arch()
    cache_dir = tool_cache_dir(version, arch, env)
    cached = cache_dir / WITNESS_BINARY
    if cached.is_file():
        actions_core.info(f"Found cached witness at: {cached}")
        actions_core.add_path(str(cache_dir))
        return cached

    url = release_url(version, os_name, arch)
    actions_core.info(f"Downloading witness {version} from {url}")
    with tempfile.TemporaryDirectory(prefix="witness-download-") as tmp:
        archive = Path(tmp) / release_archive_name(version, os_name, arch)
        download(url, archive)
        extracted = extract_witness(archive, install_dir or Path(tmp) / "extract")
        try:
            extracted.chmod(0o755)
        except OSError as exc:
            actions_core.warning(f"Failed to make witness executable: {exc}")
        cache_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(extracted, cached)

    actions_core.info(f"Cached witness at: {cached}")
    actions_core.add_path(str(cache_dir))
    return cached

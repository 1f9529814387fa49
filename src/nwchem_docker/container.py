"""
Docker invocation for containerized NWChem images.

Builds `docker pull` / `docker run` command lines and executes them with the
caller's standard streams attached, so the container's own diagnostics are
what the user sees.
"""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

DEFAULT_IMAGE = "nwchemorg/nwchem-qc"
DEFAULT_TAG = "latest"
DOCKER_COMMAND = "docker"


@dataclass
class ContainerResult:
    """Outcome of one container run."""

    command: List[str]
    returncode: int
    pull_returncode: Optional[int] = None

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0


def image_reference(image: str = DEFAULT_IMAGE, tag: str = DEFAULT_TAG) -> str:
    return f"{image}:{tag}"


def build_pull_command(
    image: str = DEFAULT_IMAGE,
    tag: str = DEFAULT_TAG,
    docker_command: str = DOCKER_COMMAND,
) -> List[str]:
    return [docker_command, "pull", image_reference(image, tag)]


def build_run_command(
    docker_args: Optional[Sequence[str]] = None,
    command_args: Optional[Sequence[str]] = None,
    image: str = DEFAULT_IMAGE,
    tag: str = DEFAULT_TAG,
    docker_command: str = DOCKER_COMMAND,
    interactive: bool = True,
) -> List[str]:
    """
    Build the `docker run` command line.

    Args:
        docker_args: Extra flags for `docker run` (e.g. ["-v", "/tmp/x:/opt/data"]).
        command_args: Arguments passed to the image's entry point.
        image: Image name without tag.
        tag: Image tag.
        docker_command: Docker executable.
        interactive: If True, attach an interactive terminal (-it).

    Returns:
        Argument list suitable for subprocess.
    """
    cmd = [docker_command, "run"]
    cmd.extend(docker_args or [])
    if interactive:
        cmd.append("-it")
    cmd.append(image_reference(image, tag))
    cmd.extend(command_args or [])
    return cmd


def check_docker_available(docker_command: str = DOCKER_COMMAND) -> Tuple[bool, Optional[str]]:
    """
    Check whether the Docker CLI can be found on PATH.

    Returns:
        Tuple of (is_available, path_to_docker_executable)
    """
    docker_path = shutil.which(docker_command)
    if docker_path:
        return (True, docker_path)
    return (False, None)


def invoke_container_image(
    docker_args: Optional[Sequence[str]] = None,
    command_args: Optional[Sequence[str]] = None,
    skip_pull: bool = False,
    tag: str = DEFAULT_TAG,
    image: str = DEFAULT_IMAGE,
    docker_command: str = DOCKER_COMMAND,
    interactive: bool = True,
) -> ContainerResult:
    """
    Pull (unless skipped) and run a container image.

    Both processes inherit stdin/stdout/stderr. Non-zero exit codes are not
    raised; they are reported in the returned ContainerResult. A failed pull
    does not prevent the run (a locally cached image may still work).

    Args:
        docker_args: Extra flags for `docker run`.
        command_args: Arguments passed to the image's entry point.
        skip_pull: If True, do not pull the image first.
        tag: Image tag.
        image: Image name without tag.
        docker_command: Docker executable.
        interactive: If True, pass -it to `docker run`.

    Returns:
        ContainerResult with the run command and exit statuses.
    """
    pull_returncode = None
    if not skip_pull:
        pull = subprocess.run(
            build_pull_command(image, tag, docker_command),
            check=False,
        )
        pull_returncode = pull.returncode

    cmd = build_run_command(
        docker_args=docker_args,
        command_args=command_args,
        image=image,
        tag=tag,
        docker_command=docker_command,
        interactive=interactive,
    )
    result = subprocess.run(cmd, check=False)
    return ContainerResult(
        command=cmd,
        returncode=result.returncode,
        pull_returncode=pull_returncode,
    )

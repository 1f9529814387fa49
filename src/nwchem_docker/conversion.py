"""
NWChem input deck to Broombridge conversion through the NWChem container.

The input deck is copied into a private staging directory, that directory is
mounted into the container at /opt/data, and the container is asked to
process the deck by base name. The container writes `<deck stem>.yaml` next
to the deck, which is then copied to the requested destination.
"""

from __future__ import annotations

import shutil
import sys
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, Optional, Union

from nwchem_docker.container import (
    DEFAULT_IMAGE,
    DEFAULT_TAG,
    DOCKER_COMMAND,
    ContainerResult,
    invoke_container_image,
)

CONTAINER_DATA_DIR = "/opt/data"
TARGET_EXTENSION = ".yaml"
INPUT_EXTENSION = ".nw"
STAGING_PREFIX = "nwchem-docker-"


@dataclass
class ConversionResult:
    """Outcome of one deck conversion."""

    input_deck: Path
    destination: Path
    output_name: str
    output_found: bool
    container: ContainerResult

    @property
    def succeeded(self) -> bool:
        return self.output_found


def _swap_extension(path: Path) -> Path:
    # pathlib gives ".nw" no suffix; treat a bare dot-name as all extension
    if path.name.startswith(".") and not path.suffix and len(path.name) > 1:
        return path.with_name(TARGET_EXTENSION)
    return path.with_suffix(TARGET_EXTENSION)


def default_destination(input_deck: Union[str, Path]) -> Path:
    """Input deck path with its extension swapped for the Broombridge one."""
    return _swap_extension(Path(input_deck))


def resolve_destination(
    input_deck: Union[str, Path],
    destination_path: Optional[Union[str, Path]] = None,
) -> Path:
    if destination_path is not None:
        return Path(destination_path)
    return default_destination(input_deck)


def expected_output_name(input_deck: Union[str, Path]) -> str:
    """
    Name of the file the container writes into the staging directory.

    Always derived from the input deck, never from the destination.
    """
    return _swap_extension(Path(input_deck)).name


def is_windows(platform: Optional[str] = None) -> bool:
    platform = sys.platform if platform is None else platform
    return platform.startswith("win") or platform == "cygwin"


def normalize_mount_path(path: Union[str, Path], platform: Optional[str] = None) -> str:
    """
    Format a host path for use in a Docker volume mount.

    Docker on Windows expects forward slashes (C:/Users/...) in -v arguments;
    other platforms use the path as-is.
    """
    path_str = str(path)
    if is_windows(platform):
        return path_str.replace("\\", "/")
    return path_str


def volume_mount(host_path: Union[str, Path], platform: Optional[str] = None) -> str:
    return f"{normalize_mount_path(host_path, platform)}:{CONTAINER_DATA_DIR}"


@contextmanager
def staging_directory() -> Iterator[Path]:
    """Create a uniquely named temp directory and remove it on exit."""
    staging = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX))
    try:
        yield staging
    finally:
        shutil.rmtree(staging)


def _missing_output_message(output_name: str, platform: Optional[str] = None) -> str:
    message = f"  Error: Expected output {output_name} was not produced by the container."
    if is_windows(platform):
        message += (
            "\n  On Windows this usually means the drive holding the temp directory"
            " is not shared with Docker (Docker Desktop > Settings > Resources > File sharing)."
        )
    return message


def convert_input_to_output(
    input_deck: Union[str, Path],
    destination_path: Optional[Union[str, Path]] = None,
    skip_pull: bool = False,
    tag: str = DEFAULT_TAG,
    image: str = DEFAULT_IMAGE,
    docker_command: str = DOCKER_COMMAND,
    invoker: Callable[..., ContainerResult] = invoke_container_image,
) -> ConversionResult:
    """
    Convert an NWChem input deck to Broombridge using the NWChem container.

    Args:
        input_deck: Path to the NWChem input deck (.nw).
        destination_path: Where to write the Broombridge file
            (default: input deck path with a .yaml extension).
        skip_pull: If True, use the locally cached image.
        tag: Image tag.
        image: Image name without tag.
        docker_command: Docker executable.
        invoker: Container invoker (same signature as invoke_container_image).

    Returns:
        ConversionResult. A missing output is reported, not raised.
    """
    input_deck = Path(input_deck)
    destination = resolve_destination(input_deck, destination_path)
    output_name = expected_output_name(input_deck)

    with staging_directory() as staging:
        shutil.copy2(input_deck, staging / input_deck.name)

        print(f"  Staged {input_deck.name} in {staging}")
        container_result = invoker(
            docker_args=["-v", volume_mount(staging.resolve())],
            command_args=[input_deck.name],
            skip_pull=skip_pull,
            tag=tag,
            image=image,
            docker_command=docker_command,
        )

        output_file = staging / output_name
        output_found = output_file.is_file()
        if output_found:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(output_file, destination)
            print(f"  ✓ Wrote {destination}")
        else:
            print(_missing_output_message(output_name))
            if not container_result.succeeded:
                print(f"  Container exited with code {container_result.returncode}.")

    return ConversionResult(
        input_deck=input_deck,
        destination=destination,
        output_name=output_name,
        output_found=output_found,
        container=container_result,
    )

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from nwchem_docker.broombridge import (
    print_broombridge_summary,
    summarize_broombridge,
    write_summary_json,
)
from nwchem_docker.container import (
    DEFAULT_IMAGE,
    DEFAULT_TAG,
    DOCKER_COMMAND,
    check_docker_available,
    image_reference,
    invoke_container_image,
)
from nwchem_docker.conversion import (
    INPUT_EXTENSION,
    convert_input_to_output,
    expected_output_name,
    resolve_destination,
)
from nwchem_docker.deck import describe_input_deck


def _add_image_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--image",
        type=str,
        default=DEFAULT_IMAGE,
        help=f"Docker image to run (default: '{DEFAULT_IMAGE}')"
    )
    parser.add_argument(
        "--tag",
        type=str,
        default=DEFAULT_TAG,
        help=f"Image tag (default: '{DEFAULT_TAG}')"
    )
    parser.add_argument(
        "--skip-pull",
        action="store_true",
        default=False,
        help="Use the locally cached image instead of pulling it first (default: False)"
    )
    parser.add_argument(
        "--docker-command",
        type=str,
        default=DOCKER_COMMAND,
        help=f"Docker executable (default: '{DOCKER_COMMAND}')"
    )


def parse_arguments(args: List[str]) -> argparse.Namespace:
    """
    Parse command-line arguments for nwchem-docker.
    """
    parser = argparse.ArgumentParser(
        description="Run NWChem in Docker and convert NWChem input decks to Broombridge"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # Generic container invocation
    run_parser = subparsers.add_parser(
        "run",
        help="Run the NWChem image with pass-through arguments"
    )
    _add_image_arguments(run_parser)
    run_parser.add_argument(
        "--volume", "-v",
        action="append",
        default=[],
        metavar="HOST:CONTAINER",
        help="Bind mount passed to 'docker run -v' (repeatable)"
    )
    run_parser.add_argument(
        "--docker-arg",
        action="append",
        default=[],
        metavar="ARG",
        help="Extra 'docker run' flag, e.g. --docker-arg=--rm (repeatable)"
    )
    run_parser.add_argument(
        "--no-tty",
        action="store_true",
        default=False,
        help="Do not pass -it to 'docker run' (for scripts and CI) (default: False)"
    )
    run_parser.add_argument(
        "command_args",
        nargs=argparse.REMAINDER,
        help="Arguments passed to the image's entry point"
    )
    run_parser.set_defaults(handler=run_container)

    # Input deck -> Broombridge
    convert_parser = subparsers.add_parser(
        "convert",
        help="Convert an NWChem input deck to Broombridge (.yaml)"
    )
    _add_image_arguments(convert_parser)
    convert_parser.add_argument(
        "input_deck",
        type=str,
        help=f"NWChem input deck ({INPUT_EXTENSION})"
    )
    convert_parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Destination file or existing directory (default: input deck with .yaml extension)"
    )
    convert_parser.add_argument(
        "--summary",
        action="store_true",
        default=False,
        help="Print a summary of the Broombridge file after conversion (default: False)"
    )
    convert_parser.add_argument(
        "--json-output",
        type=str,
        default=None,
        help="Write the Broombridge summary as JSON to this path (default: None)"
    )
    convert_parser.set_defaults(handler=run_conversion)

    # Deck inspection
    inspect_parser = subparsers.add_parser(
        "inspect",
        help="Show title, tasks and geometry of an NWChem input deck"
    )
    inspect_parser.add_argument(
        "input_deck",
        type=str,
        help=f"NWChem input deck ({INPUT_EXTENSION})"
    )
    inspect_parser.set_defaults(handler=run_inspect)

    parsed = parser.parse_args(args)
    if parsed.command == "run" and parsed.command_args[:1] == ["--"]:
        parsed.command_args = parsed.command_args[1:]
    return parsed


def validate_inputs(args: argparse.Namespace) -> Path:
    """
    Validate the input deck and return the destination path.
    """
    input_deck = Path(args.input_deck)
    if not input_deck.is_file():
        raise ValueError(f"Input deck not found: {args.input_deck}")
    if input_deck.suffix.lower() != INPUT_EXTENSION:
        print(f"Warning: {input_deck.name} does not have the {INPUT_EXTENSION} extension")

    output = getattr(args, "output", None)
    if output is not None and Path(output).is_dir():
        return Path(output) / expected_output_name(input_deck)
    return resolve_destination(input_deck, output)


def _require_docker(docker_command: str) -> bool:
    available, _path = check_docker_available(docker_command)
    if not available:
        print(f"Error: Docker executable '{docker_command}' not found on PATH.")
        print("  Install Docker (https://docs.docker.com/get-docker/) or pass --docker-command.")
    return available


def run_container(args: argparse.Namespace) -> int:
    """Generic `docker run` of the NWChem image; returns the container's exit code."""
    if not _require_docker(args.docker_command):
        return 1

    docker_args: List[str] = []
    for volume in args.volume:
        docker_args.extend(["-v", volume])
    docker_args.extend(args.docker_arg)

    print(f"--- Running {image_reference(args.image, args.tag)} ---")
    try:
        result = invoke_container_image(
            docker_args=docker_args,
            command_args=args.command_args,
            skip_pull=args.skip_pull,
            tag=args.tag,
            image=args.image,
            docker_command=args.docker_command,
            interactive=not args.no_tty,
        )
    except OSError as e:
        print(f"Error: {e}")
        return 1
    if result.pull_returncode:
        print(f"Warning: docker pull exited with code {result.pull_returncode}")
    if not result.succeeded:
        print(f"\nContainer exited with code {result.returncode}. Check output above.")
    return result.returncode


def _report_broombridge(destination: Path, args: argparse.Namespace) -> None:
    try:
        summary = summarize_broombridge(destination)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Warning: Could not summarize {destination.name}: {e}")
        return

    if args.summary:
        print_broombridge_summary(summary)
    if args.json_output:
        try:
            write_summary_json(summary, args.json_output)
            print(f"\nSummary saved to: {args.json_output}")
        except OSError as e:
            print(f"\nWarning: Could not save JSON: {e}")


def run_conversion(args: argparse.Namespace) -> int:
    """End-to-end input deck -> Broombridge conversion; returns 0 when output was retrieved."""
    try:
        destination = validate_inputs(args)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    if not _require_docker(args.docker_command):
        return 1

    print("--- Converting NWChem input deck to Broombridge ---")
    print(f"Input deck:  {args.input_deck}")
    print(f"Image:       {image_reference(args.image, args.tag)}")
    print(f"Destination: {destination}")

    try:
        result = convert_input_to_output(
            args.input_deck,
            destination_path=destination,
            skip_pull=args.skip_pull,
            tag=args.tag,
            image=args.image,
            docker_command=args.docker_command,
        )
    except OSError as e:
        print(f"Error: {e}")
        return 1
    if result.container.pull_returncode:
        print(f"Warning: docker pull exited with code {result.container.pull_returncode}")
    if not result.output_found:
        return 1

    if args.summary or args.json_output:
        _report_broombridge(result.destination, args)
    return 0


def run_inspect(args: argparse.Namespace) -> int:
    try:
        info = describe_input_deck(args.input_deck)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    print(f"Input deck:  {info.path}")
    print(f"Title:       {info.title or '(none)'}")
    print(f"Formula:     {info.formula} ({info.n_atoms} atoms)")
    if info.tasks:
        for task in info.tasks:
            print(f"Task:        {task}")
    else:
        print("Task:        (none)")
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the CLI."""
    args = parse_arguments(sys.argv[1:] if argv is None else argv)
    sys.exit(args.handler(args))


if __name__ == "__main__":
    main()

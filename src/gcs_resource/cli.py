# src/gcs_resource/cli.py

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TextIO

from gcs_resource import log_utils
from gcs_resource.commands import CheckCommand, InCommand, OutCommand
from gcs_resource.config import load_config, merge_source_defaults
from gcs_resource.exceptions import GCSResourceError, RequestError
from gcs_resource.models import (
    CheckRequest,
    InRequest,
    OutRequest,
    Source,
    check_response_to_list,
)
from gcs_resource.storage import GCSClient, StorageClient

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def create_storage(source: Source) -> StorageClient:
    """Build the storage client for a validated source."""
    return GCSClient.from_json_key(source.json_key, project=source.project)


def read_request(stream: TextIO) -> Any:
    """
    Read the JSON request document from `stream`.

    Raises:
        RequestError: If the input is not valid JSON.
    """
    try:
        return json.load(stream)
    except ValueError as e:
        raise RequestError("reading request from stdin", details=str(e)) from e


def write_response(response: Any, stream: TextIO) -> None:
    stream.write(json.dumps(response))
    stream.write("\n")
    stream.flush()


def run_check(payload: Any) -> List[Dict[str, str]]:
    request = CheckRequest.from_dict(payload)
    request.source.validate()
    versions = CheckCommand(create_storage(request.source)).run(request)
    return check_response_to_list(versions)


def run_in(destination_dir: str, payload: Any) -> Dict[str, Any]:
    request = InRequest.from_dict(payload)
    request.source.validate()
    response = InCommand(create_storage(request.source)).run(destination_dir, request)
    return response.to_dict()


def run_out(source_dir: str, payload: Any) -> Dict[str, Any]:
    request = OutRequest.from_dict(payload)
    request.source.validate()
    response = OutCommand(create_storage(request.source)).run(source_dir, request)
    return response.to_dict()


def _configure(config_path: Optional[str], log_level: Optional[str]) -> Dict[str, Any]:
    """Load local defaults and apply logging settings; the flag beats the file."""
    config = load_config(config_path)

    level = log_level or config.get("log_level")
    if level:
        log_utils.set_log_level(str(level))

    log_dir = config.get("log_dir")
    if log_dir:
        log_utils.add_file_logging(Path(str(log_dir)), str(level or "INFO"))

    return config


def _execute(
    operation: Callable[[Any], Any],
    config_path: Optional[str] = None,
    log_level: Optional[str] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> int:
    """
    Run one resource operation end to end.

    Reads the request from stdin, merges local source defaults into it, runs
    `operation` and writes its JSON result to stdout. Every failure is logged
    to stderr and turned into exit status 1.
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    try:
        config = _configure(config_path, log_level)
        payload = merge_source_defaults(read_request(stdin), config)
        response = operation(payload)
    except (GCSResourceError, OSError) as e:
        log_utils.logger.error("error running command: %s", e)
        return EXIT_FAILURE

    write_response(response, stdout)
    return EXIT_SUCCESS


def _add_global_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--log-level",
        dest="log_level",
        metavar="LEVEL",
        help="Log level for diagnostics on stderr (e.g. DEBUG, INFO)",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        metavar="PATH",
        help="YAML file with source defaults and settings",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gcs-resource",
        description="Google Cloud Storage resource: check, in and out over JSON on stdin/stdout",
    )
    _add_global_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("check", help="Report versions newer than the given one")

    in_parser = subparsers.add_parser("in", help="Fetch a version into a directory")
    in_parser.add_argument("directory", metavar="DEST", help="Destination directory")

    out_parser = subparsers.add_parser("out", help="Publish a file from a directory")
    out_parser.add_argument("directory", metavar="SRC", help="Sources directory")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for the `gcs-resource` command.

    Dispatches the `check`, `in DEST` and `out SRC` subcommands. Usage errors
    exit with status 2 through argparse.
    """
    args = build_parser().parse_args(argv)

    if args.command == "check":
        operation: Callable[[Any], Any] = run_check
    elif args.command == "in":
        operation = lambda payload: run_in(args.directory, payload)  # noqa: E731
    else:
        operation = lambda payload: run_out(args.directory, payload)  # noqa: E731

    return _execute(operation, args.config_path, args.log_level)


def _single_command_parser(prog: str, directory_help: Optional[str]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog)
    _add_global_options(parser)
    if directory_help:
        parser.add_argument("directory", help=directory_help)
    return parser


def check_main(argv: Optional[List[str]] = None) -> int:
    """Entry point laid out as the resource's `check` executable."""
    args = _single_command_parser("gcs-resource-check", None).parse_args(argv)
    return _execute(run_check, args.config_path, args.log_level)


def in_main(argv: Optional[List[str]] = None) -> int:
    """Entry point laid out as the resource's `in` executable."""
    args = _single_command_parser("gcs-resource-in", "Destination directory").parse_args(
        argv
    )
    return _execute(
        lambda payload: run_in(args.directory, payload),
        args.config_path,
        args.log_level,
    )


def out_main(argv: Optional[List[str]] = None) -> int:
    """Entry point laid out as the resource's `out` executable."""
    args = _single_command_parser("gcs-resource-out", "Sources directory").parse_args(
        argv
    )
    return _execute(
        lambda payload: run_out(args.directory, payload),
        args.config_path,
        args.log_level,
    )


if __name__ == "__main__":
    sys.exit(main())

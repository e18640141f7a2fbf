"""Command-line interface for nihms-assembler."""

import argparse
import json
import logging
import shutil
import sys
from pathlib import Path
from urllib.parse import urlparse

from deposit_assembler.assemblers import NihmsAssembler
from deposit_assembler.clients import RepositoryClient
from deposit_assembler.resources import SourceResolver
from schemas.package import Archive, Compression
from schemas.submission import Submission

DEFAULT_OUTPUT_DIR = Path("./workspace/packages")
DEFAULT_ARCHIVE = Archive.TAR.value
DEFAULT_COMPRESSION = Compression.GZIP.value
USER_AGENT = "nihms-assembler/1.0"


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def _is_url(location: str) -> bool:
    return urlparse(location).scheme in ("http", "https")


def load_submission(location: str) -> tuple[Submission, Path]:
    """Load a submission from a JSON file or a repository URL.

    Args:
        location: Path to a submission JSON file, or an http(s) URL

    Returns:
        The submission and the directory relative file locations resolve against
    """
    if _is_url(location):
        parsed = urlparse(location)
        config = {
            "base_url": f"{parsed.scheme}://{parsed.netloc}",
            "user_agent": USER_AGENT,
        }
        with RepositoryClient(config) as client:
            return client.fetch_submission(location), Path.cwd()

    path = Path(location).resolve()
    with open(path) as f:
        data = json.load(f)
    return Submission.model_validate(data), path.parent


def assemble(args: argparse.Namespace) -> int:
    """Execute the assemble command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    if not _is_url(args.submission) and not Path(args.submission).exists():
        logger.error(f"Submission file not found: {args.submission}")
        return 1

    output_dir = args.output
    output_dir.mkdir(parents=True, exist_ok=True)

    package_path = None
    try:
        submission, base_dir = load_submission(args.submission)

        with SourceResolver(base_dir=base_dir) as resolver:
            assembler = NihmsAssembler(
                archive=Archive(args.archive),
                compression=Compression(args.compression),
                source_resolver=resolver,
            )
            package = assembler.assemble(submission)
            package_path = output_dir / package.metadata.name

            with package.open() as stream, open(package_path, "wb") as out:
                shutil.copyfileobj(stream, out)

        metadata = package.metadata
        logger.info(f"Assembled package: {metadata.name}")
        logger.info(f"  Submission: {submission.id}")
        logger.info(f"  Files: {len(submission.files)}")
        logger.info(f"  Size: {metadata.size_bytes} bytes")
        logger.info(f"  Output: {package_path}")

        return 0

    except Exception as e:
        logger.error(f"Failed to assemble package: {e}")
        if package_path is not None and package_path.exists():
            package_path.unlink()
        return 1


def list_resources(args: argparse.Namespace) -> int:
    """Execute the list-resources command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    if not _is_url(args.submission) and not Path(args.submission).exists():
        logger.error(f"Submission file not found: {args.submission}")
        return 1

    try:
        submission, base_dir = load_submission(args.submission)

        with SourceResolver(base_dir=base_dir) as resolver:
            package = NihmsAssembler(source_resolver=resolver).assemble(submission)
            for resource in package.resources():
                print(f"{resource.name}\t{resource.mime_type}\t{resource.size_bytes}")

        return 0

    except Exception as e:
        logger.error(f"Failed to list resources: {e}")
        return 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        prog="nihms-assembler",
        description="Assemble submissions into NIHMS native packages",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    assemble_parser = subparsers.add_parser(
        "assemble",
        help="Assemble a submission into a package file",
        description="Stream a submission's metadata, manifest and custodial files into a NIHMS native package.",
    )
    assemble_parser.add_argument(
        "--submission",
        type=str,
        required=True,
        help="Path or http(s) URL of the submission JSON document",
    )
    assemble_parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_OUTPUT_DIR,
        help=f"Output directory for packages (default: {DEFAULT_OUTPUT_DIR})",
    )
    assemble_parser.add_argument(
        "--archive",
        choices=[Archive.TAR.value, Archive.ZIP.value],
        default=DEFAULT_ARCHIVE,
        help=f"Archive format (default: {DEFAULT_ARCHIVE})",
    )
    assemble_parser.add_argument(
        "--compression",
        choices=[c.value for c in Compression],
        default=DEFAULT_COMPRESSION,
        help=f"Compression format (default: {DEFAULT_COMPRESSION})",
    )
    assemble_parser.set_defaults(func=assemble)

    list_parser = subparsers.add_parser(
        "list-resources",
        help="List the resources a submission's package would contain",
        description="Print the name, MIME type and size of each package entry, in package order.",
    )
    list_parser.add_argument(
        "--submission",
        type=str,
        required=True,
        help="Path or http(s) URL of the submission JSON document",
    )
    list_parser.set_defaults(func=list_resources)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())

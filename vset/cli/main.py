"""Command-line interface for packaging and publishing extensions."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

from vset.errors import VsetError
from vset.package import build_package
from vset.publish import GalleryClient, publish_vsix
from vset.secrets import use_dotenv
from vset.settings import Settings, resolve_settings

logger = logging.getLogger(__name__)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.debug)
    use_dotenv(Path.cwd() / ".env")

    try:
        if args.command == "package":
            return _handle_package(args)
        if args.command == "publish":
            return _handle_publish(args)
        if args.command == "create-publisher":
            return _handle_create_publisher(args)
        if args.command == "delete-publisher":
            return _handle_delete_publisher(args)
    except (VsetError, OSError) as exc:
        logger.error("%s", exc)
        return 1

    parser.error(f"Unknown command '{args.command}'")
    return 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vset", description="Package and publish extensions.")
    parser.add_argument("--debug", action="store_true", help="Print debug log messages.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    package = subparsers.add_parser("package", help="Create a vsix package for an extension.")
    _add_package_arguments(package)
    package.add_argument("-s", "--settings", help="Path to a settings file.")

    publish = subparsers.add_parser(
        "publish",
        help="Publish a VSIX package, generating it first unless --vsix is given.",
    )
    publish.add_argument("-v", "--vsix", help="Publish this VSIX package instead of packaging.")
    _add_package_arguments(publish)
    _add_gallery_arguments(publish)

    create = subparsers.add_parser("create-publisher", help="Create a publisher.")
    create.add_argument("name")
    create.add_argument("display_name")
    create.add_argument("description")
    _add_gallery_arguments(create)

    delete = subparsers.add_parser("delete-publisher", help="Delete a publisher.")
    delete.add_argument("publisher_name")
    _add_gallery_arguments(delete)

    return parser


def _add_package_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-r", "--root", help="Root for files in the vsix package. [.]")
    parser.add_argument(
        "-m",
        "--manifest-glob",
        action="append",
        help="Pattern for manifest files to join (repeatable). [**/*-manifest.json]",
    )
    parser.add_argument("-o", "--output-path", help="Path and file name of the generated vsix.")


def _add_gallery_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-g", "--gallery-url", help="URL of the gallery.")
    parser.add_argument("-t", "--token", help="Personal access token.")
    parser.add_argument("-s", "--settings", help="Path to a settings file.")


def _handle_package(args: argparse.Namespace) -> int:
    settings = _resolve(args)
    if settings.package is None:
        raise VsetError("No package settings resolved.")
    result = build_package(settings.package)
    _print_json(
        {
            "vsix_path": str(result.vsix_path),
            "sha256": result.sha256,
            "logs": [f"VSIX written to {result.vsix_path}"],
        }
    )
    return 0


def _handle_publish(args: argparse.Namespace) -> int:
    settings = _resolve(args)
    publish_settings = settings.publish
    if settings.package is None:
        logger.info("VSIX was manually specified. Skipping generation.")
    else:
        packaged = build_package(settings.package)
        publish_settings = publish_settings.model_copy(update={"vsix_path": packaged.vsix_path})

    result = publish_vsix(publish_settings)
    _print_json(result.to_dict())
    return 0


def _handle_create_publisher(args: argparse.Namespace) -> int:
    publish_settings = _resolve(args).publish
    logger.info("Creating publisher %s", args.name)
    client = GalleryClient(publish_settings.gallery_url, publish_settings.token)
    publisher = client.create_publisher(args.name, args.display_name, args.description)
    _print_json({"publisher": publisher.model_dump(by_alias=True, exclude_none=True)})
    return 0


def _handle_delete_publisher(args: argparse.Namespace) -> int:
    publish_settings = _resolve(args).publish
    logger.info("Deleting publisher %s", args.publisher_name)
    client = GalleryClient(publish_settings.gallery_url, publish_settings.token)
    client.delete_publisher(args.publisher_name)
    _print_json({"deleted": args.publisher_name})
    return 0


def _resolve(args: argparse.Namespace) -> Settings:
    settings_path = Path(args.settings) if getattr(args, "settings", None) else None
    return resolve_settings(_collect_options(args), settings_path=settings_path)


def _collect_options(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        "root": getattr(args, "root", None),
        "manifest_globs": getattr(args, "manifest_glob", None),
        "output_path": getattr(args, "output_path", None),
        "gallery_url": getattr(args, "gallery_url", None),
        "token": getattr(args, "token", None),
        "vsix_path": getattr(args, "vsix", None),
    }


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _print_json(payload: Mapping[str, object]) -> None:
    print(json.dumps(payload, indent=2, default=str))

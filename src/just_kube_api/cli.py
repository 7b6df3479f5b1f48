"""Command line entry point."""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional, Sequence

from just_kube_api.assets.provision import provision_assets
from just_kube_api.config import (
    DEFAULT_APISERVER_VERSION,
    DEFAULT_ETCD_VERSION,
    ProvisionConfig,
    default_assets_dir,
)
from just_kube_api.environment import assets_env
from just_kube_api.errors import ProvisioningError, log_error
from just_kube_api.logging import configure_logging, get_logger
from just_kube_api.platforms import get_platform_info

logger = get_logger("cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="just-kube-api",
        description="Download verified kube-apiserver and etcd binaries.",
    )
    parser.add_argument(
        "--assets-directory",
        type=Path,
        default=None,
        help=f"directory for etcd and kube-apiserver binaries (default: {default_assets_dir()})",
    )
    parser.add_argument(
        "--apiserver-version",
        default=DEFAULT_APISERVER_VERSION,
        help="kube-apiserver version to use",
    )
    parser.add_argument(
        "--etcd-version",
        default=DEFAULT_ETCD_VERSION,
        help="etcd version to use",
    )
    parser.add_argument("--os", help="target operating system (default: detected)")
    parser.add_argument("--arch", help="target architecture (default: detected)")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="log verbosity on stderr",
    )
    return parser


def _config_from_args(args: argparse.Namespace) -> ProvisionConfig:
    if args.os and args.arch:
        os_name, arch = args.os, args.arch
    else:
        info = get_platform_info()
        os_name, arch = args.os or info.os_name, args.arch or info.arch

    return ProvisionConfig(
        assets_dir=args.assets_directory or default_assets_dir(),
        apiserver_version=args.apiserver_version,
        etcd_version=args.etcd_version,
        os=os_name,
        arch=arch,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = _config_from_args(args)
    except RuntimeError as e:
        logger.error({"event": "unsupported_platform", "error": str(e)})
        return 1

    try:
        asyncio.run(provision_assets(config))
    except ProvisioningError as e:
        log_error(e, logger=logger)
        return 1
    except KeyboardInterrupt:
        logger.warning({"event": "interrupted"})
        return 130

    for key, value in assets_env(config).items():
        print(f"{key}={value}")

    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
cli.py — layer-deploy command line.

Commands:
    hash    Print the current dependency fingerprint.
    check   Compare the fingerprint with the stored value of every target.
            Exit 0 when all match (warm path), 1 when any target must update.
    deploy  Package code, refresh the shared layer if needed, update targets.

Usage:
    layer-deploy deploy --config layer-deploy.toml [--verbose]

LAYER_DEPLOY_DEBUG=1 is equivalent to --verbose.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from aws_lambda_powertools import Logger

from layer_deploy.aws.registry import ClientRegistry
from layer_deploy.config import DEFAULT_CONFIG_FILE, DeployConfig, load_config
from layer_deploy.exceptions import LayerDeployError
from layer_deploy.fingerprint import compute_fingerprint
from layer_deploy.orchestrator import build_dependencies, deploy

logger = Logger(service="layer-deploy")


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logger.setLevel(level)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="layer-deploy",
        description="Deploy functions with a shared, fingerprinted dependency layer",
    )
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_FILE,
        help="Path to layer-deploy.toml or a pyproject.toml with [tool.layer-deploy]",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("hash", help="Print the current dependency fingerprint")
    subparsers.add_parser("check", help="Compare fingerprint with stored target values")
    subparsers.add_parser("deploy", help="Deploy code and layers to all targets")
    return parser.parse_args(argv)


def cmd_hash(config: DeployConfig) -> int:
    fingerprint = compute_fingerprint(config.layer.manifest_paths, config.project_version)
    print(f"fingerprint={fingerprint}")
    return 0


def cmd_check(config: DeployConfig, registry: ClientRegistry) -> int:
    fingerprint = compute_fingerprint(config.layer.manifest_paths, config.project_version)
    store = registry.fingerprint_store(region=config.region, prefix=config.ssm_prefix)
    all_match = True
    for target in config.targets:
        stored = store.get_hash(target.key)
        if stored == fingerprint:
            print(f"HASH_MATCH target={target.key} hash={fingerprint}")
        else:
            all_match = False
            print(
                f"HASH_MISMATCH target={target.key} "
                f"computed={fingerprint} stored={stored or 'none'}"
            )
    return 0 if all_match else 1


def cmd_deploy(config: DeployConfig, registry: ClientRegistry) -> int:
    results = deploy(config, build_dependencies(config, registry))
    for result in results:
        layers = "unchanged" if result.layers is None else ",".join(result.layers)
        print(
            f"DEPLOYED target={result.target.key} "
            f"status={result.update.status_code} layers={layers}"
        )
    return 0


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""
    args = parse_args(argv)
    configure_logging(args.verbose or bool(os.environ.get("LAYER_DEPLOY_DEBUG")))
    try:
        config = load_config(args.config)
        registry = ClientRegistry(default_region=config.region)
        if args.command == "hash":
            return cmd_hash(config)
        if args.command == "check":
            return cmd_check(config, registry)
        if args.command == "deploy":
            return cmd_deploy(config, registry)
    except LayerDeployError as exc:
        logger.error(f"{args.command} failed: {exc}")
        return 1
    return 2


if __name__ == "__main__":
    sys.exit(main())

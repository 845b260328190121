"""Command-line inspection of the effective client configuration.

Usage:
    python -m grocer_client.config
    python -m grocer_client.config --json
    python -m grocer_client.config --check
"""

import argparse
import json
import sys
from typing import Any

from grocer_client.core.exceptions import ConfigurationError

from .api import resolve_config
from .schema import FIELD_ORDER
from .types import ResolvedConfig

# ruff: noqa: T201


def get_config_info(env_file: str | None = None) -> dict[str, Any]:
    """Return the effective configuration and its origins as plain data."""
    resolved = resolve_config(use_env_file=env_file)
    return {
        "config": {field: getattr(resolved, field) for field in FIELD_ORDER},
        "origin": dict(resolved.origin),
        "warnings": _get_config_warnings(resolved),
    }


def _get_config_warnings(resolved: ResolvedConfig) -> list[str]:
    """Non-fatal issues worth surfacing."""
    warnings = []
    if resolved.base_url.startswith("http://") and "localhost" not in resolved.base_url:
        warnings.append("base_url uses plain HTTP; session cookies travel unencrypted")
    if resolved.renewal_timeout_seconds is None:
        warnings.append("renewal_timeout_seconds unset; a hung refresh call blocks waiters")
    elif resolved.renewal_timeout_seconds < resolved.timeout_seconds:
        warnings.append(
            "renewal_timeout_seconds is below timeout_seconds; a slow but healthy "
            "refresh call can end the session"
        )
    return warnings


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for configuration introspection."""
    parser = argparse.ArgumentParser(
        description="Inspect grocer-client configuration",
        prog="python -m grocer_client.config",
    )
    parser.add_argument("--env-file", help="Read a .env file below the environment")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON instead of human-readable format",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only check that configuration is valid (exit code 0=valid, 1=invalid)",
    )
    args = parser.parse_args(argv)

    try:
        resolved = resolve_config(use_env_file=args.env_file)
    except ConfigurationError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    if args.check:
        print("✅ Configuration is valid")
        return 0

    if args.json:
        print(json.dumps(get_config_info(args.env_file), indent=2))
        return 0

    print("=== Effective Configuration ===")
    print(resolved.audit())
    warnings = _get_config_warnings(resolved)
    if warnings:
        print("\n⚠️  Warnings:")
        for warning in warnings:
            print(f"  - {warning}")
    return 0

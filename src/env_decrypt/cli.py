"""
Command line interface for the environment decrypter.
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional

from .bootstrap import DecryptStatus, decrypt_environment
from .commands import CommandNotFound, DecryptionError, default_registry
from .config import LoaderConfig, load_config


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Decrypt and load encrypted .env files")
    parser.add_argument(
        "--config",
        default=os.getenv("ENV_DECRYPT_CONFIG"),
        help="Optional YAML file overriding variable names and the scratch path",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    bootstrap = subparsers.add_parser("bootstrap", help="Run the startup decrypt-and-load sequence")
    bootstrap.add_argument("--base-path", default=".", help="Directory holding the encrypted file")

    decrypt = subparsers.add_parser("decrypt", help="Decrypt an encrypted environment file")
    decrypt.add_argument("--env", dest="environment", help="Environment name, e.g. staging")
    decrypt.add_argument("--key", help="Decryption key; defaults to the configured key variable")
    decrypt.add_argument("--base-path", default=".", help="Directory holding the encrypted file")
    decrypt.add_argument("--force", action="store_true", help="Overwrite an existing plaintext file")
    decrypt.add_argument("--filename", help="Name of the plaintext file to write")
    decrypt.add_argument("--path", help="Directory to write the plaintext file to")
    return parser.parse_args(argv)


def _run_bootstrap(args: argparse.Namespace, config: LoaderConfig) -> int:
    result = decrypt_environment(args.base_path, config=config)
    for name in result.loaded:
        print(name)
    return 1 if result.status is DecryptStatus.FAILED else 0


def _run_decrypt(args: argparse.Namespace, config: LoaderConfig) -> int:
    key = args.key or os.getenv(config.key_variable, "")
    try:
        written = default_registry().call(
            config.decrypt_command,
            base_path=args.base_path,
            key=key,
            environment=args.environment,
            force=args.force,
            filename=args.filename,
            path=args.path,
        )
    except (CommandNotFound, DecryptionError, OSError) as exc:
        print(str(exc), file=sys.stderr)
        return 1
    print(f"Environment successfully decrypted to {written}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    config = load_config(args.config) if args.config else LoaderConfig()
    if args.command == "bootstrap":
        return _run_bootstrap(args, config)
    return _run_decrypt(args, config)


if __name__ == "__main__":
    sys.exit(main())

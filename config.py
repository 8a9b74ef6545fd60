"""
Configuration module for command-line flag parsing and type-safe config.

Flags follow the single-dash style (``-region``, ``-requests=3``); every
string flag falls back to an environment variable where one makes sense.
The resulting object is validated once and never mutated.
"""
import argparse
import os
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from utils.exceptions import ValidationError

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class Config:
    """Type-safe configuration object built from flags and environment."""

    endpoint: str = ""
    region: str = ""
    access_key: str = ""
    secret_key: str = ""
    bucket: str = ""
    key: str = ""
    requests: int = 1
    log_level: str = "INFO"
    fail_fast: bool = True

    @property
    def endpoint_url(self) -> Optional[str]:
        """Endpoint override, or None to let botocore resolve it."""
        return self.endpoint or None

    @property
    def region_name(self) -> Optional[str]:
        return self.region or None

    def validate(self) -> "Config":
        """
        Check values that argparse cannot.

        Raises:
            ValidationError: If any value is out of range or missing.
        """
        if self.requests < 1:
            raise ValidationError(
                f"requests must be at least 1, got: {self.requests}",
                field="requests",
                value=self.requests,
            )

        if self.log_level not in VALID_LOG_LEVELS:
            raise ValidationError(
                f"LOG_LEVEL must be one of {sorted(VALID_LOG_LEVELS)}, "
                f"got: {self.log_level}",
                field="log_level",
                value=self.log_level,
            )

        # Static credentials only; the default discovery chain is bypassed
        if not self.access_key or not self.secret_key:
            raise ValidationError(
                "static credentials are required: set -access and -secret "
                "(or AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY)",
                field="access_key" if not self.access_key else "secret_key",
            )
        return self

    @classmethod
    def from_args(
        cls,
        argv: Optional[Sequence[str]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Config":
        """
        Create Config instance from command-line flags.

        Args:
            argv: Flag list without the program name (defaults to sys.argv[1:])
            environ: Environment used for defaults (defaults to os.environ)

        Raises:
            ValidationError: If flags are malformed or values are invalid.
        """
        env = os.environ if environ is None else environ
        parser = build_parser(env)
        try:
            args = parser.parse_args(argv)
        except SystemExit as e:
            # argparse already printed usage; -h exits 0
            if e.code == 0:
                raise
            raise ValidationError("invalid command-line flags") from e

        return cls(
            endpoint=args.endpoint,
            region=args.region,
            access_key=args.access,
            secret_key=args.secret,
            bucket=args.bucket,
            key=args.key,
            requests=args.requests,
            log_level=args.log_level.upper(),
            fail_fast=not args.collect,
        ).validate()


def build_parser(environ: Mapping[str, str]) -> argparse.ArgumentParser:
    """Build the flag parser, taking string defaults from ``environ``."""
    parser = argparse.ArgumentParser(
        prog="s3-fanout",
        description="Issue concurrent ListBuckets or GetObject requests "
                    "against an S3-compatible endpoint.",
        allow_abbrev=False,
    )
    parser.add_argument(
        "-region", "--region",
        default=environ.get("AWS_REGION", ""),
        help="The region to send requests to.",
    )
    parser.add_argument(
        "-endpoint", "--endpoint",
        default=environ.get("S3_ENDPOINT", ""),
        help="The endpoint URL to send requests to.",
    )
    parser.add_argument(
        "-access", "--access",
        default=environ.get("AWS_ACCESS_KEY_ID", ""),
        help="The access key to sign requests with.",
    )
    parser.add_argument(
        "-secret", "--secret",
        default=environ.get("AWS_SECRET_ACCESS_KEY", ""),
        help="The secret key to sign requests with.",
    )
    parser.add_argument(
        "-bucket", "--bucket",
        default="",
        help="The bucket to get the object from.",
    )
    parser.add_argument(
        "-key", "--key",
        default="",
        help="The key of the object to download.",
    )
    parser.add_argument(
        "-requests", "--requests",
        type=int,
        default=1,
        help="The number of simultaneous requests.",
    )
    parser.add_argument(
        "-log-level", "--log-level",
        dest="log_level",
        default=environ.get("LOG_LEVEL", "INFO"),
        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).",
    )
    parser.add_argument(
        "-collect", "--collect",
        action="store_true",
        help="Wait for every request and report a summary instead of "
             "exiting on the first failure.",
    )
    return parser


# Process-wide config instance, set once by the entry point
_config: Optional[Config] = None


def get_config(argv: Optional[Sequence[str]] = None) -> Config:
    """
    Get the global configuration instance.

    Returns:
        Config: The validated configuration object

    Raises:
        ValidationError: If flags are missing or invalid.
    """
    global _config
    if _config is None:
        _config = Config.from_args(argv)
    return _config

"""Thin wrapper around the AWS SSM Parameter Store API."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ssmedit.models import Parameter, ParameterSummary

if TYPE_CHECKING:
    from mypy_boto3_ssm import SSMClient

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"

_ARN_RE = re.compile(r"arn:aws[a-zA-Z-]*:[a-zA-Z0-9-]+:\S+")
_ACCOUNT_RE = re.compile(r"\b\d{12}\b")

_RETRY_CONFIG = Config(retries={"max_attempts": 5, "mode": "adaptive"})


class StoreError(Exception):
    """Raised when an SSM API call fails."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


def _sanitize_error(msg: str) -> str:
    """Strip ARNs and AWS account IDs from error messages."""
    msg = _ARN_RE.sub("arn:***", msg)
    msg = _ACCOUNT_RE.sub("***", msg)
    return msg


def _store_error(action: str, exc: ClientError | BotoCoreError) -> StoreError:
    code = None
    if isinstance(exc, ClientError):
        code = exc.response.get("Error", {}).get("Code")
    return StoreError(f"Failed to {action}: {_sanitize_error(str(exc))}", code=code)


@dataclass(frozen=True)
class StoreConfig:
    """Connection settings for one command invocation."""

    region: str | None = DEFAULT_REGION
    profile: str | None = None


def _make_client(config: StoreConfig) -> SSMClient:
    session = boto3.Session(profile_name=config.profile, region_name=config.region)
    return session.client("ssm", config=_RETRY_CONFIG)  # type: ignore[return-value]


class ParameterStore:
    """Get, put, delete and list parameters through a boto3 SSM client."""

    def __init__(self, client: SSMClient) -> None:
        self.client = client

    @classmethod
    def from_config(cls, config: StoreConfig) -> ParameterStore:
        try:
            return cls(_make_client(config))
        except BotoCoreError as exc:
            raise _store_error("create SSM client", exc) from exc

    def get(self, name: str, decrypt: bool = True) -> Parameter:
        """Fetch a single parameter with its value.

        Raises:
            StoreError: If the parameter does not exist or the call fails.
        """
        logger.debug("get_parameter %s (decrypt=%s)", name, decrypt)
        try:
            response = self.client.get_parameter(Name=name, WithDecryption=decrypt)
        except (ClientError, BotoCoreError) as exc:
            raise _store_error(f"fetch parameter {name}", exc) from exc

        item = response["Parameter"]
        return Parameter(
            name=item["Name"],
            value=item.get("Value", ""),
            type=item.get("Type", "String"),
            version=item.get("Version", 0),
            last_modified=item.get("LastModifiedDate"),
            tier=item.get("Tier"),
        )

    def put(
        self,
        name: str,
        value: str,
        type: str = "String",
        overwrite: bool = False,
        tier: str | None = None,
    ) -> int:
        """Write *value* under *name* and return the new version number.

        Raises:
            StoreError: On any AWS API error, including ``ParameterAlreadyExists``
                when *overwrite* is false.
        """
        put_kwargs: dict[str, Any] = {
            "Name": name,
            "Value": value,
            "Type": type,
            "Overwrite": overwrite,
        }
        if tier:
            put_kwargs["Tier"] = tier

        logger.debug(
            "put_parameter %s (type=%s, overwrite=%s, tier=%s, %d bytes)",
            name, type, overwrite, tier, len(value.encode("utf-8")),
        )
        try:
            response = self.client.put_parameter(**put_kwargs)
        except (ClientError, BotoCoreError) as exc:
            raise _store_error(f"write parameter {name}", exc) from exc
        return response.get("Version", 0)

    def delete(self, name: str) -> None:
        logger.debug("delete_parameter %s", name)
        try:
            self.client.delete_parameter(Name=name)
        except (ClientError, BotoCoreError) as exc:
            raise _store_error(f"delete parameter {name}", exc) from exc

    def list(self, prefix: str | None = None) -> list[ParameterSummary]:
        """Describe every parameter, optionally only names beginning with *prefix*.

        All result pages are drained before returning.

        Returns:
            :class:`ParameterSummary` objects sorted by name.
        """
        kwargs: dict[str, Any] = {}
        if prefix:
            kwargs["ParameterFilters"] = [
                {"Key": "Name", "Option": "BeginsWith", "Values": [prefix]}
            ]

        summaries: list[ParameterSummary] = []
        try:
            while True:
                response = self.client.describe_parameters(**kwargs)
                for item in response.get("Parameters", []):
                    summaries.append(
                        ParameterSummary(
                            name=item["Name"],
                            type=item.get("Type", "String"),
                            version=item.get("Version", 0),
                            last_modified=item.get("LastModifiedDate"),
                        )
                    )
                next_token = response.get("NextToken")
                if not next_token:
                    break
                kwargs["NextToken"] = next_token
        except (ClientError, BotoCoreError) as exc:
            raise _store_error("list parameters", exc) from exc

        logger.debug("describe_parameters returned %d parameter(s)", len(summaries))
        return sorted(summaries, key=lambda s: s.name)

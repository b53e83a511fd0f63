"""Shared pytest fixtures for ssmedit tests."""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import patch

import boto3
import pytest
from moto import mock_aws

from ssmedit.store import ParameterStore

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(scope="session")
def raw_parameters() -> list[dict]:
    """Load raw parameter dicts from the JSON fixture file."""
    with open(FIXTURES_DIR / "parameters.json") as fh:
        return json.load(fh)


@pytest.fixture(autouse=True)
def aws_credentials():
    """Ensure moto doesn't try to use real AWS credentials."""
    os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
    os.environ.setdefault("AWS_SECURITY_TOKEN", "testing")
    os.environ.setdefault("AWS_SESSION_TOKEN", "testing")


@pytest.fixture()
def ssm_client(raw_parameters):
    """A moto-mocked SSM client with fixture parameters pre-loaded."""
    with mock_aws():
        client = boto3.client("ssm", region_name="us-east-1")
        for item in raw_parameters:
            client.put_parameter(Name=item["Name"], Value=item["Value"], Type=item["Type"])
        yield client


@pytest.fixture()
def store(ssm_client) -> ParameterStore:
    return ParameterStore(ssm_client)


class FakeEditor:
    """Stands in for the interactive editor: each call writes the next scripted content.

    A ``None`` entry leaves the file untouched, like quitting without saving.
    """

    def __init__(self, contents: list[str | None]) -> None:
        self.contents = list(contents)
        self.calls: list[Path] = []
        self.seen: list[str] = []

    def __call__(self, path, editor=None) -> None:
        path = Path(path)
        self.calls.append(path)
        self.seen.append(path.read_text(encoding="utf-8"))
        content = self.contents.pop(0)
        if content is not None:
            path.write_text(content, encoding="utf-8")

    @property
    def call_count(self) -> int:
        return len(self.calls)


@pytest.fixture()
def fake_editor():
    """Return a factory that patches the workflow's editor with a :class:`FakeEditor`."""
    patchers = []

    def _install(*contents: str | None) -> FakeEditor:
        editor = FakeEditor(list(contents))
        patcher = patch("ssmedit.workflow.open_in_editor", side_effect=editor)
        patcher.start()
        patchers.append(patcher)
        return editor

    yield _install
    for patcher in patchers:
        patcher.stop()

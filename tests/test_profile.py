"""Tests for ProfileConfig and the MFA applicability rules."""

from __future__ import annotations

import subprocess

import pytest

from aws_mfa_secure.credentials.profile import ProfileConfig
from aws_mfa_secure.errors import AwsCliNotFoundError

from tests.conftest import MFA_SERIAL, STATIC_KEYS


class _FakeAwsCli:
    def __init__(self, values: dict[str, str]) -> None:
        self.values = values
        self.calls: list[list[str]] = []

    def __call__(self, command, **kwargs):
        self.calls.append(command)
        prop = command[3]
        value = self.values.get(prop)
        if value is None:
            return subprocess.CompletedProcess(command, 1, stdout="", stderr="")
        return subprocess.CompletedProcess(command, 0, stdout=f"{value}\n", stderr="")


@pytest.fixture
def fake_cli(monkeypatch: pytest.MonkeyPatch):
    def install(values: dict[str, str]) -> _FakeAwsCli:
        cli = _FakeAwsCli(values)
        monkeypatch.setattr(subprocess, "run", cli)
        return cli

    return install


def test_get_strips_and_passes_profile(fake_cli) -> None:
    cli = fake_cli({"region": "  eu-west-1  "})
    config = ProfileConfig(profile="dev", aws_cli="/usr/local/bin/aws")

    assert config.get("region") == "eu-west-1"
    assert cli.calls == [["/usr/local/bin/aws", "configure", "get", "region", "--profile", "dev"]]


def test_get_is_memoized(fake_cli) -> None:
    cli = fake_cli({"region": "eu-west-1"})
    config = ProfileConfig()

    config.get("region")
    config.get("region")
    config.get("role_arn")
    config.get("role_arn")

    assert [call[3] for call in cli.calls] == ["region", "role_arn"]


def test_get_unset_property_is_none(fake_cli) -> None:
    fake_cli({})

    assert ProfileConfig().get("source_profile") is None


def test_get_missing_cli(monkeypatch: pytest.MonkeyPatch) -> None:
    def _missing(command, **kwargs):
        raise FileNotFoundError(command[0])

    monkeypatch.setattr(subprocess, "run", _missing)

    with pytest.raises(AwsCliNotFoundError):
        ProfileConfig(aws_cli="no-such-aws").get("region")


def test_no_mfa_device_never_requires_mfa(fake_cli) -> None:
    values = dict(STATIC_KEYS)
    del values["mfa_serial"]
    fake_cli(values)

    assert ProfileConfig().is_mfa_required() is False


def test_source_profile_does_not_require_mfa(fake_cli) -> None:
    fake_cli({**STATIC_KEYS, "source_profile": "base"})

    assert ProfileConfig().is_mfa_required() is False


def test_role_arn_does_not_require_mfa(fake_cli) -> None:
    fake_cli({**STATIC_KEYS, "role_arn": "arn:aws:iam::111111111111:role/Admin"})

    assert ProfileConfig().is_mfa_required() is False


def test_static_keys_with_device_require_mfa(fake_cli) -> None:
    fake_cli(STATIC_KEYS)

    config = ProfileConfig()

    assert config.mfa_serial == MFA_SERIAL
    assert config.is_mfa_required() is True


def test_missing_secret_does_not_require_mfa(fake_cli) -> None:
    values = dict(STATIC_KEYS)
    del values["aws_secret_access_key"]
    fake_cli(values)

    assert ProfileConfig().is_mfa_required() is False


def test_serial_override_takes_precedence(fake_cli) -> None:
    values = dict(STATIC_KEYS)
    del values["mfa_serial"]
    cli = fake_cli(values)

    config = ProfileConfig(mfa_serial_override="arn:aws:iam::111111111111:mfa/override")

    assert config.mfa_serial == "arn:aws:iam::111111111111:mfa/override"
    assert config.is_mfa_required() is True
    assert "mfa_serial" not in [call[3] for call in cli.calls]

"""
tests/unit/test_container_and_cli.py
──────────────────────────────────────────────────────────────────────────────
Unit tests for the DI container and the CLI delivery layer.

The CLI is exercised through run() with an argparse Namespace; the gateway
is replaced with one wired to mock adapters so no HTTP calls are made.
"""
from __future__ import annotations

import argparse
import json
from unittest.mock import patch

import pytest

from bundle_trainer.adapters.json_store import JsonFileResultStore
from bundle_trainer.adapters.sample_archives import ArchiveDirectorySource
from bundle_trainer.adapters.visual_recognition import VisualRecognitionAdapter
from bundle_trainer.domain.exceptions import AuthenticationError, ConfigurationError
from bundle_trainer.domain.models import FailurePolicy
from bundle_trainer.interfaces import cli
from bundle_trainer.services.cache_gateway import CacheGateway
from bundle_trainer.services.container import build_gateway
from bundle_trainer.tests.conftest import make_settings


# ── container ──────────────────────────────────────────────────────────────

class TestBuildGateway:
    def test_wires_concrete_adapters(self, tmp_path):
        settings = make_settings(bundles_dir=tmp_path, cache_file=tmp_path / "c.json")
        gateway = build_gateway(settings)
        assert isinstance(gateway, CacheGateway)
        assert isinstance(gateway.store, JsonFileResultStore)
        assert gateway.store.location == str(tmp_path / "c.json")
        assert isinstance(gateway._samples, ArchiveDirectorySource)
        assert isinstance(gateway.orchestrator._submitter._service, VisualRecognitionAdapter)

    def test_submitter_and_poller_share_one_client(self, tmp_path):
        gateway = build_gateway(make_settings(bundles_dir=tmp_path))
        orchestrator = gateway.orchestrator
        assert orchestrator._submitter._service is orchestrator._poller._service

    def test_policy_passed_through(self):
        gateway = build_gateway(make_settings(failure_policy="abort"))
        assert gateway.orchestrator.policy is FailurePolicy.ABORT

    @pytest.mark.parametrize("field,value", [
        ("min_tags", 0),
        ("concurrency", 0),
        ("polling_delay", -1.0),
        ("max_polls", -1),
    ])
    def test_invalid_settings_rejected(self, field, value):
        with pytest.raises(ConfigurationError):
            build_gateway(make_settings(**{field: value}))

    def test_empty_api_key_rejected(self):
        with pytest.raises(AuthenticationError):
            build_gateway(make_settings(api_key=""))


# ── CLI ────────────────────────────────────────────────────────────────────

def _args(**overrides) -> argparse.Namespace:
    values = dict(
        cached=False,
        dry_run=False,
        concurrency=None,
        policy=None,
        json_output=False,
        verbose=False,
    )
    values.update(overrides)
    return argparse.Namespace(**values)


@pytest.fixture
def cli_env(gateway, settings):
    """Point the CLI at the mock-wired gateway fixture."""
    with patch.object(cli, "get_settings", return_value=settings), \
         patch.object(cli, "build_gateway", return_value=gateway) as build:
        yield build


class TestCliRun:
    def test_create_writes_cache_and_exits_zero(self, cli_env, memory_store):
        assert cli.run(_args()) == 0
        assert memory_store.saves == 1
        assert len(memory_store.results) == 4

    def test_create_logs_count_and_location(self, cli_env, caplog):
        with caplog.at_level("INFO", logger="bundle_trainer.interfaces.cli"):
            cli.run(_args())
        assert "4 classifiers created, details written to memory://classifiers.json" in caplog.text

    def test_cached_uses_existing_results(self, cli_env, memory_store, mock_service):
        memory_store.results = []
        assert cli.run(_args(cached=True)) == 0
        assert mock_service.events == []

    def test_dry_run_prints_combinations(self, cli_env, mock_service, capsys):
        assert cli.run(_args(dry_run=True)) == 0
        out = capsys.readouterr().out.splitlines()
        assert out[0] == "fruit_apple_banana_non-fruit"
        assert len(out) == 4
        assert mock_service.events == []

    def test_json_output(self, cli_env, capsys):
        assert cli.run(_args(json_output=True)) == 0
        data = json.loads(capsys.readouterr().out)
        assert len(data) == 4
        assert all(d["status"] == "ready" for d in data)

    def test_fatal_error_exits_one(self, cli_env, mock_service, memory_store, capsys):
        mock_service.fail_create["fruit_apple_banana_non-fruit"] = RuntimeError("network down")
        assert cli.run(_args()) == 1
        assert "network down" in capsys.readouterr().err
        assert memory_store.saves == 0

    def test_overrides_reach_settings(self, cli_env):
        cli.run(_args(concurrency=3, policy="abort"))
        passed = cli_env.call_args[0][0]
        assert passed.concurrency == 3
        assert passed.failure_policy == "abort"

    def test_bad_concurrency_exits_two(self, cli_env):
        assert cli.run(_args(concurrency=0)) == 2
        cli_env.assert_not_called()

    def test_initialisation_error_exits_one(self, settings):
        with patch.object(cli, "get_settings", return_value=settings), \
             patch.object(cli, "build_gateway", side_effect=AuthenticationError("API_KEY")):
            assert cli.run(_args()) == 1

    def test_ctrl_c_exits_one_and_stops_orchestrator(self, cli_env, gateway, memory_store, capsys):
        with patch.object(gateway, "create_and_persist", side_effect=KeyboardInterrupt), \
             patch.object(gateway.orchestrator, "stop") as stop:
            assert cli.run(_args()) == 1
        stop.assert_called_once_with()
        assert "Interrupted" in capsys.readouterr().err
        assert memory_store.saves == 0


class TestCliParser:
    def test_defaults(self):
        args = cli._build_parser().parse_args([])
        assert not args.cached and not args.dry_run
        assert args.concurrency is None and args.policy is None

    def test_rejects_unknown_policy(self):
        with pytest.raises(SystemExit):
            cli._build_parser().parse_args(["--policy", "ignore"])

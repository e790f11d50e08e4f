from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from upset_finder import cli
from upset_finder.config import HarvesterConfig
from upset_finder.pronouns import PronounPolicy
from upset_finder.storage import CsvUpsetSink, DynamoUpsetStorage


def test_apply_args_overrides_config():
    config = HarvesterConfig(api_key="token")
    args = cli.parse_args(
        [
            "--after-date",
            "1700000000",
            "--output-dir",
            "out",
            "--window-pages",
            "3",
            "--pronoun-policy",
            "strict",
            "--abort-on-error",
        ]
    )

    updated = cli.apply_args(config, args)

    assert updated.after_date == 1_700_000_000
    assert updated.output_dir == "out"
    assert updated.window_pages == 3
    assert updated.pronoun_policy is PronounPolicy.STRICT
    assert updated.abort_on_error is True
    assert config.after_date is None


def test_apply_args_without_flags_keeps_config():
    config = HarvesterConfig(api_key="token", window_pages=7)

    assert cli.apply_args(config, cli.parse_args([])) == config


def test_build_sinks_csv_only(tmp_path):
    sinks = cli.build_sinks(HarvesterConfig(api_key="token", output_dir=str(tmp_path)))

    assert len(sinks) == 1
    assert isinstance(sinks[0], CsvUpsetSink)
    sinks[0].close()


def test_build_sinks_with_table(tmp_path):
    config = HarvesterConfig(
        api_key="token", output_dir=str(tmp_path), table_name="upsets"
    )
    resource = MagicMock()
    with patch("upset_finder.cli.boto3.resource", return_value=resource) as factory:
        sinks = cli.build_sinks(config)

    factory.assert_called_once_with("dynamodb", region_name="us-east-1")
    resource.Table.assert_called_once_with("upsets")
    assert isinstance(sinks[1], DynamoUpsetStorage)
    sinks[0].close()


@pytest.mark.asyncio
async def test_run_closes_sinks(tmp_path):
    config = HarvesterConfig(api_key="token", output_dir=str(tmp_path))
    sink = MagicMock()
    harvester = MagicMock()
    harvester.run = AsyncMock(return_value=3)

    with patch("upset_finder.cli.build_sinks", return_value=[sink]), patch(
        "upset_finder.cli.UpsetHarvester", return_value=harvester
    ):
        assert await cli.run(config) == 3

    sink.close.assert_called_once()

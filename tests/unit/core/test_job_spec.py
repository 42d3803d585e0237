"""Unit tests for YAML job file parsing."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest

from core.config import SongbulkConfig
from core.errors import SongbulkJobSpecError
from core.job_spec import load_job_spec


def _config() -> SongbulkConfig:
    return replace(SongbulkConfig.from_env(), shard_size=0, max_workers=1)


def _write(tmp_path: Path, body: str) -> str:
    spec_path = tmp_path / "job.yaml"
    spec_path.write_text(body, encoding="utf-8")
    return str(spec_path)


def test_load_job_spec_reads_required_and_optional_fields(tmp_path: Path) -> None:
    """A complete job file should map onto bulk import options."""
    spec_path = _write(
        tmp_path,
        "version: 1\n"
        "table_uri: kiji://.env/default/songs\n"
        "input: songs.json\n"
        "output: out\n"
        "strict: true\n"
        "shard_size: 100\n",
    )

    options = load_job_spec(spec_path, _config())

    assert options.table_uri == "kiji://.env/default/songs"
    assert (options.input_uri, options.output_dir) == ("songs.json", "out")
    assert options.strict is True
    assert (options.shard_size, options.max_workers) == (100, 1)


@pytest.mark.parametrize(
    "body",
    [
        "",
        "- not a mapping\n",
        "version: 2\ntable_uri: t\ninput: i\noutput: o\n",
        "version: 1\ninput: i\noutput: o\n",
        "version: 1\ntable_uri: t\ninput: i\noutput: o\nextra: 1\n",
        "version: 1\ntable_uri: t\ninput: i\noutput: o\nstrict: maybe\n",
        "version: 1\ntable_uri: t\ninput: i\noutput: o\nmax_workers: 0\n",
        "version: [1\n",
    ],
)
def test_load_job_spec_rejects_invalid_files(tmp_path: Path, body: str) -> None:
    """Invalid job files should raise job spec errors."""
    with pytest.raises(SongbulkJobSpecError):
        load_job_spec(_write(tmp_path, body), _config())


def test_load_job_spec_raises_for_missing_file(tmp_path: Path) -> None:
    """A missing job file should raise a job spec error."""
    with pytest.raises(SongbulkJobSpecError):
        load_job_spec(str(tmp_path / "missing.yaml"), _config())

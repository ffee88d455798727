import json
from pathlib import Path

import yaml

from parking_pricing import cli


def _store_file(tmp_path: Path, car_rates) -> Path:
    path = tmp_path / "store.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "rates": car_rates,
                "thresholds": [
                    {"id": "t1", "source_rate_id": "r-hour", "target_rate_id": "r-day", "threshold_amount": 30}
                ],
            },
            allow_unicode=True,
        ),
        encoding="utf-8",
    )
    return path


def _args(store: Path, *extra):
    return [
        "--store-file",
        str(store),
        "--rate-id",
        "r-hour",
        "--vehicle-type",
        "Carro",
        "--entry-date",
        "2024-01-01",
        "--entry-time",
        "08:00",
        "--exit-date",
        "2024-01-01",
        *extra,
    ]


def test_cli_writes_json_and_markdown(tmp_path: Path, car_rates):
    store = _store_file(tmp_path, car_rates)
    prefix = tmp_path / "out"

    code = cli.main(
        _args(store, "--exit-time", "14:00", "--output-format", "both", "--output-prefix", str(prefix))
    )

    assert code == 0
    payload = json.loads((tmp_path / "out.json").read_text(encoding="utf-8"))
    assert payload["price"] == 60.0
    assert payload["suggestions"][0]["rate_id"] == "r-day"
    assert "## Suggestions" in (tmp_path / "out.md").read_text(encoding="utf-8")


def test_cli_unknown_rate_exits_with_error(tmp_path: Path, car_rates):
    store = _store_file(tmp_path, car_rates)
    argv = _args(store, "--exit-time", "14:00")
    argv[argv.index("r-hour")] = "r-missing"

    assert cli.main(argv) == 1


def test_cli_invalid_range_exits_with_error(tmp_path: Path, car_rates):
    store = _store_file(tmp_path, car_rates)

    assert cli.main(_args(store, "--exit-time", "07:00")) == 1


def test_cli_trace_path(tmp_path: Path, car_rates):
    store = _store_file(tmp_path, car_rates)
    trace = tmp_path / "trace.jsonl"

    assert cli.main(_args(store, "--exit-time", "09:00", "--trace-path", str(trace))) == 0
    assert trace.read_text(encoding="utf-8").count("\n") >= 3


def test_cli_missing_or_broken_store_file_exits_with_error(tmp_path: Path):
    assert cli.main(_args(tmp_path / "absent.yaml", "--exit-time", "09:00")) == 1

    broken = tmp_path / "broken.yaml"
    broken.write_text("rates: [\n  {id: r-hour", encoding="utf-8")
    assert cli.main(_args(broken, "--exit-time", "09:00")) == 1

import os
from pathlib import Path
import subprocess
import sys

import pytest

from regnet.cli import main

SRC_ROOT = Path(__file__).resolve().parents[1] / "src"


def _run_cli(*args: str) -> subprocess.CompletedProcess[str]:
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(
        item for item in (str(SRC_ROOT), env.get("PYTHONPATH", "")) if item
    )
    return subprocess.run(
        [sys.executable, "-m", "regnet", *args],
        capture_output=True,
        text=True,
        env=env,
    )


def test_cli_help_top_level() -> None:
    result = _run_cli("--help")
    assert result.returncode == 0
    assert "usage:" in result.stdout.lower()


def test_cli_help_subcommands() -> None:
    for subcommand in ("netprop", "union"):
        result = _run_cli(subcommand, "--help")
        assert result.returncode == 0
        assert "usage:" in result.stdout.lower()
        assert "--config" in result.stdout


def test_cli_without_command_exits_with_usage(capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        main([])

    assert exc.value.code == 2
    assert "usage:" in capsys.readouterr().out.lower()


def test_cli_netprop_writes_outputs(tmp_path, write_edges) -> None:
    network = write_edges("net.txt", [("a", "b"), ("b", "c")])
    out_dir = tmp_path / "out"

    main(
        [
            "netprop",
            f"network_file={network}",
            f"output_directory={out_dir}",
            "compute_betweenness=true",
        ]
    )

    table = (out_dir / "net_nodeProperties_dir.txt").read_text(encoding="utf-8")
    assert table.splitlines()[0] == "\tout_degree\tin_degree\tbetweenness"
    assert (out_dir / "networkMeans.txt").is_file()


def test_cli_netprop_reads_config_file(tmp_path) -> None:
    network = tmp_path / "net.txt"
    network.write_text("a\tb\n", encoding="utf-8")
    config = tmp_path / "settings.yaml"
    config.write_text(
        f"network_file: {network}\noutput_directory: {tmp_path / 'out'}\nis_directed: false\n",
        encoding="utf-8",
    )

    main(["netprop", "--config", str(config), "output_suffix=_run1"])

    assert (tmp_path / "out" / "net_run1_nodeProperties_undir.txt").is_file()
    assert (tmp_path / "out" / "networkMeans_run1.txt").is_file()


def test_cli_failure_exits_with_status_one(tmp_path) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["netprop", f"network_file={tmp_path / 'missing.txt'}"])

    assert exc.value.code == 1


def test_cli_rejects_unknown_setting() -> None:
    with pytest.raises(SystemExit) as exc:
        main(["netprop", "no_such_setting=1", "network_file=x.txt"])

    assert exc.value.code == 1

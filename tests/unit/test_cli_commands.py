import json
from pathlib import Path
import textwrap

from click.testing import CliRunner

from elementquery.cli import cli


def write_multi_doc_yaml(tmp_path: Path) -> Path:
    y = textwrap.dedent(
        """
        name: alpha
        alternatives:
          - selector: "#alpha"
        ---
        name: beta
        mode: all
        poller: {kind: num_tries, tries: 3, interval_ms: 100}
        alternatives:
          - selector: ".beta"
          - selector: {strategy: xpath, value: "//div[@data-beta]"}
        """
    )
    p = tmp_path / "demo.yaml"
    p.write_text(y, encoding="utf-8")
    return p


def test_cli_list_with_multi_doc(tmp_path: Path):
    write_multi_doc_yaml(tmp_path)
    runner = CliRunner()
    result = runner.invoke(cli, ["list", "--dir", str(tmp_path), "--no-recursive"])
    assert result.exit_code == 0
    assert "Found 2 query(s)" in result.output
    assert "beta [all] (2 alternatives, 3 tries every 100 ms)" in result.output


def test_cli_validate_with_dir(tmp_path: Path):
    write_multi_doc_yaml(tmp_path)
    runner = CliRunner()
    result = runner.invoke(cli, ["validate", "--dir", str(tmp_path), "--no-recursive"])
    assert result.exit_code == 0
    assert result.output.count("OK  ") == 2


def test_cli_validate_reports_invalid_file(tmp_path: Path):
    write_multi_doc_yaml(tmp_path)
    bad = tmp_path / "bad.yaml"
    bad.write_text("name: bad\nalternatives: []\n", encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(cli, ["validate", str(tmp_path)])
    assert result.exit_code == 1
    assert "ERR " in result.output
    assert result.output.count("OK  ") == 2


def test_cli_validate_without_targets(tmp_path: Path):
    runner = CliRunner()
    result = runner.invoke(cli, ["validate"])
    assert result.exit_code == 2


def test_cli_config_prints_json():
    runner = CliRunner()
    result = runner.invoke(cli, ["config"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["ELEMENT_POLLER"] in {"no_wait", "timeout", "num_tries", "timeout_min_tries"}
    assert "QUERY_ERROR_POLICY" in data

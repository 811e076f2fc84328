"""
CLI and config tests.
"""
import json
import os
import subprocess
import sys

from click.testing import CliRunner

from tfreclaim.cli import cli

FIXTURES = os.path.join(os.path.dirname(__file__), "fixtures")
AWS = os.path.join(FIXTURES, "aws_inventory.yaml")


def test_module_execution():
    """Test that 'python -m tfreclaim' works."""
    result = subprocess.run(
        [sys.executable, "-m", "tfreclaim", "--help"],
        capture_output=True,
        text=True
    )
    assert result.returncode == 0
    assert "tfreclaim" in result.stdout


def test_import_writes_both_outputs(tmp_path):
    state = tmp_path / "terraform.tfstate"
    hcl = tmp_path / "main.tf"
    result = CliRunner().invoke(cli, ["import", AWS, "--tfstate", str(state), "--hcl", str(hcl)])
    assert result.exit_code == 0, result.output

    doc = json.loads(state.read_text(encoding="utf-8"))
    assert len(doc["resources"]) == 5
    assert doc["serial"] == 1
    assert "${aws_vpc.main.id}" in hcl.read_text(encoding="utf-8")
    assert b"\r\n" not in hcl.read_bytes()


def test_output_required(tmp_path):
    result = CliRunner().invoke(cli, ["import", AWS])
    assert result.exit_code == 2


def test_no_interpolate(tmp_path):
    hcl = tmp_path / "main.tf"
    result = CliRunner().invoke(cli, ["import", AWS, "--hcl", str(hcl), "--no-interpolate"])
    assert result.exit_code == 0
    text = hcl.read_text(encoding="utf-8")
    assert "${" not in text
    assert '"vpc-0a1b2c"' in text


def test_filters_from_flags(tmp_path):
    state = tmp_path / "terraform.tfstate"
    result = CliRunner().invoke(cli, [
        "import", AWS, "--tfstate", str(state), "-i", "aws_vpc", "-i", "aws_subnet",
    ])
    assert result.exit_code == 0
    types = {r["type"] for r in json.loads(state.read_text())["resources"]}
    assert types == {"aws_vpc", "aws_subnet"}


def test_invalid_tag_fails(tmp_path):
    state = tmp_path / "terraform.tfstate"
    result = CliRunner().invoke(cli, ["import", AWS, "--tfstate", str(state), "--tags", "nocolon"])
    assert result.exit_code == 2
    assert not state.exists()


def test_unsupported_type_writes_nothing(tmp_path):
    state = tmp_path / "terraform.tfstate"
    result = CliRunner().invoke(cli, ["import", AWS, "--tfstate", str(state), "-e", "aws_lambda_function"])
    assert result.exit_code == 2
    assert not state.exists()


def test_config_file(tmp_path):
    cfg = tmp_path / "tfreclaim.yaml"
    cfg.write_text("exclude:\n  - aws_instance\ninterpolate: false\n")
    state = tmp_path / "terraform.tfstate"
    result = CliRunner().invoke(cli, ["import", AWS, "--tfstate", str(state), "--config", str(cfg)])
    assert result.exit_code == 0
    doc = json.loads(state.read_text())
    assert all(r["type"] != "aws_instance" for r in doc["resources"])
    assert all("dependencies" not in r["instances"][0] for r in doc["resources"])


def test_log_file(tmp_path):
    log_file = tmp_path / "tfreclaim.log"
    state = tmp_path / "terraform.tfstate"
    result = CliRunner().invoke(cli, ["import", AWS, "--tfstate", str(state), "--log-file", str(log_file)])
    assert result.exit_code == 0
    assert "writing the state" in log_file.read_text(encoding="utf-8")


class TestConfig:
    def setup_method(self):
        from tfreclaim import config
        self.config = config

    def test_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("TFRECLAIM_LOG_FILE", raising=False)
        monkeypatch.delenv("TFRECLAIM_NO_INTERPOLATE", raising=False)
        assert self.config.load_config() == self.config.Config()

    def test_default_file_in_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "tfreclaim.yaml").write_text("include: aws_vpc\ntags: ['env:prod']\n")
        cfg = self.config.load_config()
        assert cfg.include == ["aws_vpc"]
        assert cfg.tags == ["env:prod"]

    def test_env_overrides(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("TFRECLAIM_LOG_FILE", "/tmp/x.log")
        monkeypatch.setenv("TFRECLAIM_NO_INTERPOLATE", "true")
        cfg = self.config.load_config()
        assert cfg.log_file == "/tmp/x.log"
        assert cfg.interpolate is False

    def test_invalid_list(self, tmp_path):
        import pytest
        from tfreclaim.errors import ValidationError
        f = tmp_path / "c.yaml"
        f.write_text("include: {a: b}\n")
        with pytest.raises(ValidationError):
            self.config.load_config(str(f))

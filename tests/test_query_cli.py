"""Tests for the command-line query tool."""

import pytest

from amdgpu_isa.knowledge_base import write_knowledge_base
from amdgpu_isa.query_cli import main


@pytest.fixture
def data_path(tmp_path, sample_knowledge_base):
    path = tmp_path / "isa.json"
    write_knowledge_base(sample_knowledge_base, path)
    return str(path)


class TestQueryCli:

    def test_hover(self, data_path, capsys):
        assert main(["v_add_f32_e32", "--data", data_path, "--language-id", "rdna3"]) == 0
        out = capsys.readouterr().out
        assert out.startswith("**v_add_f32**")
        assert "Encoding: VOP2 (32-bit)" in out
        assert "Architectures: RDNA 3/3.5" in out

    def test_filtered_out(self, data_path, capsys):
        assert main(["v_add_f32_e32", "--data", data_path, "--arch", "rdna4"]) == 1
        assert "not available for rdna4" in capsys.readouterr().out

    def test_not_found(self, data_path, capsys):
        assert main(["v_nothing_e64", "--data", data_path]) == 1
        assert "No entry for v_nothing (e64)" in capsys.readouterr().out

    def test_register(self, data_path, capsys):
        assert main(["ttmp3", "--data", data_path]) == 0
        assert capsys.readouterr().out.strip() == "**ttmp3**\n\nTrap temporary register."

    def test_complete(self, data_path, capsys):
        assert main(["v_", "--complete", "--data", data_path]) == 0
        assert capsys.readouterr().out.split() == ["v_add_f32", "v_mov_b32"]

    def test_signature(self, data_path, capsys):
        assert main(["--signature", "v_mov_b32 v0, ", "--data", data_path]) == 0
        out = capsys.readouterr().out.splitlines()
        assert out[0] == "v_mov_b32 vdst, src0"
        assert out[2].startswith(" → src0")

    def test_missing_data(self, tmp_path, capsys):
        assert main(["v_add_f32", "--data", str(tmp_path / "missing.json")]) == 1
        assert "Failed to read isa.json" in capsys.readouterr().err

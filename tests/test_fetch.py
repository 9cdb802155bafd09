"""Tests for downloading and unpacking the ISA archive (network mocked)."""

import io

import pytest
import requests

from amdgpu_isa import fetch
from amdgpu_isa.fetch import FetchError, fetch_isa_documents, main, unpack_archive
from isa_samples import FakeResponse, make_zip


class TestUnpackArchive:

    def test_extracts_xml_files(self, tmp_path):
        content = make_zip({"amdgpu_isa_rdna3.xml": "<Spec/>", "readme.txt": "hi", "amdgpu_isa_cdna3.xml": "<Spec/>"})
        xml_files = unpack_archive(content, tmp_path / "out")
        assert [path.name for path in xml_files] == ["amdgpu_isa_cdna3.xml", "amdgpu_isa_rdna3.xml"]
        assert (tmp_path / "out" / "readme.txt").exists()

    def test_overwrites_existing(self, tmp_path):
        (tmp_path / "a.xml").write_text("old", encoding="utf-8")
        unpack_archive(make_zip({"a.xml": "new"}), tmp_path)
        assert (tmp_path / "a.xml").read_text(encoding="utf-8") == "new"

    def test_not_a_zip(self, tmp_path):
        with pytest.raises(FetchError):
            unpack_archive(b"<html>error page</html>", tmp_path)


class TestFetch:

    def test_download_and_unpack(self, tmp_path, monkeypatch, capsys):
        calls = []

        def fake_get(url, timeout):
            calls.append(url)
            return FakeResponse(make_zip({"amdgpu_isa_rdna4.xml": "<Spec/>"}))

        monkeypatch.setattr(fetch.requests, "get", fake_get)
        xml_files = fetch_isa_documents(tmp_path / "xmls")

        assert calls == [fetch.ISA_ARCHIVE_URL]
        assert [path.name for path in xml_files] == ["amdgpu_isa_rdna4.xml"]

    def test_progress_goes_to_given_stream(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr(fetch.requests, "get",
                            lambda url, timeout: FakeResponse(make_zip({"a.xml": "<Spec/>"})))
        out = io.StringIO()
        fetch_isa_documents(tmp_path, out=out)

        assert capsys.readouterr().out == ""
        lines = out.getvalue().splitlines()
        assert lines[0] == f"Fetching {fetch.ISA_ARCHIVE_URL}..."
        assert lines[1].startswith("✓ Downloaded")
        assert lines[2] == f"✓ Unpacked 1 XML documents to {tmp_path}"

    def test_http_error(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr(fetch.requests, "get", lambda url, timeout: FakeResponse(b"", 404))
        with pytest.raises(FetchError):
            fetch_isa_documents(tmp_path)

    def test_network_error(self, tmp_path, monkeypatch, capsys):
        def fake_get(url, timeout):
            raise requests.ConnectionError("unreachable")

        monkeypatch.setattr(fetch.requests, "get", fake_get)
        with pytest.raises(FetchError, match="unreachable"):
            fetch_isa_documents(tmp_path)

    def test_main_exit_codes(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr(fetch.requests, "get",
                            lambda url, timeout: FakeResponse(make_zip({"x.xml": "<Spec/>"})))
        assert main(["--output-dir", str(tmp_path / "ok")]) == 0

        monkeypatch.setattr(fetch.requests, "get", lambda url, timeout: FakeResponse(b"", 500))
        assert main(["--output-dir", str(tmp_path / "bad")]) == 1
        assert "✗" in capsys.readouterr().err

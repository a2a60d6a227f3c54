"""Tests for the sngc command line."""
import png
import pytest

from sngc.main import main, EXIT_COMPILE_ERROR, EXIT_CODEC_ERROR

GOOD = "IHDR { width 2 height 1 }\nIMAGE { ff00 }\n"


def write_source(tmp_path, text: str, name: str = "pic.sng"):
    path = tmp_path / name
    path.write_text(text)
    return path


class TestCompileFile:
    def test_default_output_name(self, tmp_path):
        src = write_source(tmp_path, GOOD)
        assert main([str(src)]) == 0
        out = tmp_path / "pic.png"
        width, height, rows, _ = png.Reader(filename=str(out)).read()
        assert [list(r) for r in rows] == [[255, 0]]

    def test_explicit_output(self, tmp_path):
        src = write_source(tmp_path, GOOD)
        out = tmp_path / "other.png"
        assert main([str(src), "-o", str(out)]) == 0
        assert out.read_bytes().startswith(png.signature)

    def test_dry_run_lists_chunks(self, tmp_path, capsys):
        src = write_source(tmp_path, GOOD)
        assert main([str(src), "--dry-run"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines == ["1: HeaderChunk", "2: ImageChunk"]
        assert not (tmp_path / "pic.png").exists()


class TestDiagnostics:
    def test_compile_error(self, tmp_path, capsys):
        src = write_source(tmp_path, "IHDR { width 2 height 1 }\nFOO { }\n")
        assert main([str(src)]) == EXIT_COMPILE_ERROR
        err = capsys.readouterr().err.strip()
        assert err == f"{src}:2: unknown chunk type"
        assert not (tmp_path / "pic.png").exists()

    def test_eof_error(self, tmp_path, capsys):
        src = write_source(tmp_path, "IHDR { width 2 height 1 }\n")
        assert main([str(src)]) == EXIT_COMPILE_ERROR
        assert capsys.readouterr().err.strip() == f"{src}:EOF: no image data"

    def test_codec_error(self, tmp_path, capsys):
        src = write_source(tmp_path, "IHDR { width 1 height 1 bitdepth 3 }\nIMAGE { 0 }\n")
        assert main([str(src)]) == EXIT_CODEC_ERROR
        assert "invalid bit depth 3" in capsys.readouterr().err

    def test_single_diagnostic_line(self, tmp_path, capsys):
        src = write_source(tmp_path, "IHDR { width 0 }\n")
        main([str(src)])
        assert len(capsys.readouterr().err.strip().splitlines()) == 1

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "nope.sng")]) == EXIT_COMPILE_ERROR
        assert "cannot read" in capsys.readouterr().err

    def test_token_limit_flag(self, tmp_path, capsys):
        src = write_source(tmp_path, GOOD)
        assert main([str(src), "--max-token-length", "3"]) == EXIT_COMPILE_ERROR
        assert "token too long" in capsys.readouterr().err


class TestStdin:
    def test_reads_stdin(self, monkeypatch, capsys, tmp_path):
        import io
        monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(b"IHDR { width 1 }\n")))
        assert main(["-o", str(tmp_path / "x.png")]) == EXIT_COMPILE_ERROR
        assert capsys.readouterr().err.startswith("stdin:1: image height")

    def test_non_utf8_stdin(self, monkeypatch, capsys, tmp_path):
        import io
        monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(
            b"# \xff\xfe\nIHDR { width 1 height 1 }\nIMAGE { 00 }\n")))
        out = tmp_path / "x.png"
        assert main(["-o", str(out)]) == 0
        assert out.read_bytes().startswith(png.signature)


class TestEncoding:
    def test_latin1_comment_compiles(self, tmp_path):
        src = tmp_path / "cafe.sng"
        src.write_bytes(b"# caf\xe9\nIHDR { width 1 height 1 }\nIMAGE { 00 }\n")
        assert main([str(src)]) == 0
        assert (tmp_path / "cafe.png").read_bytes().startswith(png.signature)

    def test_high_byte_in_source_is_one_diagnostic(self, tmp_path, capsys):
        src = tmp_path / "bad.sng"
        src.write_bytes(b"# caf\xe9\nIHDR { width 1 height 1 }\nIMAGE { 0\xe9 }\n")
        assert main([str(src)]) == EXIT_COMPILE_ERROR
        lines = capsys.readouterr().err.strip().splitlines()
        assert lines == [f"{src}:3: bad character in IMAGE block"]

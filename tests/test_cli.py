import zipfile
from pathlib import Path

from typer.testing import CliRunner

from conftest import instrument, make_project, make_sample, soundfont
from lmms_pkg import __version__
from lmms_pkg.cli import app

runner = CliRunner()


def test_help_lists_commands():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for command in ("pack", "unpack", "check", "info", "export", "import"):
        assert command in result.output


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_pack_check_info_unpack(tmp_path: Path):
    kick = make_sample(tmp_path / "samples" / "kick.wav", b"kick")
    project = make_project(tmp_path / "song.mmp", instrument(str(kick)))
    package = tmp_path / "demo.mmpk"

    result = runner.invoke(app, ["pack", str(project), "--target", str(tmp_path / "demo")])
    assert result.exit_code == 0, result.output
    assert "1 file(s) copied" in result.output
    assert package.is_file()

    result = runner.invoke(app, ["check", str(package)])
    assert result.exit_code == 0, result.output
    assert "Valid package." in result.output

    result = runner.invoke(app, ["info", str(package)])
    assert result.exit_code == 0, result.output
    assert "1.2.2" in result.output

    result = runner.invoke(app, ["unpack", str(package), "-t", str(tmp_path / "imported")])
    assert result.exit_code == 0, result.output
    assert "imported into" in result.output
    extracted = tmp_path / "imported" / "demo" / "resources" / "kick.wav"
    assert extracted.read_bytes() == b"kick"
    assert (tmp_path / "imported" / "demo" / "song.mmp.backup").is_file()


def test_export_and_import_aliases(tmp_path: Path):
    kick = make_sample(tmp_path / "kick.wav")
    project = make_project(tmp_path / "song.mmp", instrument(str(kick)))

    result = runner.invoke(app, ["export", str(project), "-t", str(tmp_path / "demo")])
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["import", str(tmp_path / "demo.mmpk"), "-t", str(tmp_path / "in")])
    assert result.exit_code == 0, result.output
    assert (tmp_path / "in" / "demo" / "song.mmp").is_file()


def test_pack_without_zip_and_with_soundfonts(tmp_path: Path):
    sf2 = make_sample(tmp_path / "piano.sf2")
    project = make_project(tmp_path / "song.mmp", soundfont(str(sf2)))

    result = runner.invoke(
        app, ["pack", str(project), "-t", str(tmp_path / "demo"), "--no-zip", "--sf2"]
    )

    assert result.exit_code == 0, result.output
    assert (tmp_path / "demo" / "resources" / "piano.sf2").is_file()
    assert not (tmp_path / "demo.mmpk").exists()


def test_pack_searches_extra_resource_directories(tmp_path: Path):
    make_sample(tmp_path / "library" / "pad.wav", b"pad")
    project = make_project(tmp_path / "project" / "song.mmp", instrument("/gone/pad.wav"))

    result = runner.invoke(
        app,
        [
            "pack",
            str(project),
            "-t",
            str(tmp_path / "demo"),
            "--rsc-dirs",
            str(tmp_path / "library"),
        ],
    )

    # Below a search directory the full path is kept: library/gone/pad.wav
    assert result.exit_code == 0, result.output
    assert "1 missing" in result.output

    project = make_project(tmp_path / "project2" / "song.mmp", instrument("pad.wav"))
    result = runner.invoke(
        app,
        ["pack", str(project), "-t", str(tmp_path / "demo2"), "--rsc-dirs", str(tmp_path / "library")],
    )
    assert result.exit_code == 0, result.output
    with zipfile.ZipFile(tmp_path / "demo2.mmpk") as zf:
        assert zf.read("demo2/resources/pad.wav") == b"pad"


def test_pack_missing_project_fails(tmp_path: Path):
    result = runner.invoke(app, ["pack", str(tmp_path / "nope.mmp"), "-t", str(tmp_path / "out")])
    assert result.exit_code == 1
    assert "ERROR" in result.output


def test_check_invalid_package_fails(tmp_path: Path):
    path = tmp_path / "empty.mmpk"
    with zipfile.ZipFile(path, "w"):
        pass

    result = runner.invoke(app, ["check", str(path)])

    assert result.exit_code == 1
    assert "Invalid package" in result.output


def test_unpack_invalid_package_fails(tmp_path: Path):
    path = tmp_path / "junk.mmpk"
    path.write_bytes(b"junk")

    result = runner.invoke(app, ["unpack", str(path), "-t", str(tmp_path / "in")])

    assert result.exit_code == 1
    assert "ERROR" in result.output
    assert not (tmp_path / "in").exists()

from pathlib import Path

from conftest import instrument, make_project, make_sample, sample_clip
from lmms_pkg.core.document import ProjectDocument
from lmms_pkg.core.resolver import (
    ResourceResolver,
    assign_destination_names,
    collect_referenced_paths,
    find_duplicate_basenames,
    locate,
)


def test_collect_deduplicates_exact_paths(tmp_path: Path):
    body = instrument("drums/kick.wav") + sample_clip("drums/kick.wav") + sample_clip("./drums/kick.wav")
    doc = ProjectDocument.load(make_project(tmp_path / "song.mmp", body))

    # Different spellings of one file stay distinct
    assert collect_referenced_paths(doc) == ["drums/kick.wav", "./drums/kick.wav"]


def test_collect_is_idempotent_and_skips_empty_src(tmp_path: Path):
    body = instrument("") + instrument("a.wav") + sample_clip("b.ogg")
    doc = ProjectDocument.load(make_project(tmp_path / "song.mmp", body))

    first = collect_referenced_paths(doc)
    assert first == collect_referenced_paths(doc)
    assert first == ["a.wav", "b.ogg"]


def test_find_duplicate_basenames_by_stem():
    found = find_duplicate_basenames(["a/x.wav", "b/y.wav", "c/x.wav", "d\\y.ogg", "e/z.wav"])
    assert found == ["x", "y"]


def test_assign_names_suffixes_collisions_in_order():
    entries = assign_destination_names(["a/x.wav", "b/x.wav", "c/y.wav", "d/x.wav"])
    assert [e.destination_name for e in entries] == ["x.wav", "x-1.wav", "y.wav", "x-2.wav"]
    assert [e.suffix for e in entries] == [None, 1, None, 2]


def test_assign_names_is_deterministic():
    sources = ["a/x.wav", "b/x.wav"]
    first = [e.destination_name for e in assign_destination_names(sources)]
    second = [e.destination_name for e in assign_destination_names(sources)]
    assert first == second == ["x.wav", "x-1.wav"]


def test_assign_names_never_reuses_a_name():
    entries = assign_destination_names(["a/x.wav", "b/x.wav", "c/x-1.wav"])
    names = [e.destination_name for e in entries]
    assert names[:2] == ["x.wav", "x-1.wav"]
    assert len(set(names)) == 3


def test_assign_names_handles_windows_paths():
    entries = assign_destination_names(["C:\\Samples\\kick.wav"])
    assert entries[0].destination_name == "kick.wav"


def test_locate_tries_path_as_given_first(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    make_sample(tmp_path / "kick.wav")
    make_sample(tmp_path / "sounds" / "kick.wav")

    assert locate("kick.wav", [Path("sounds")]).resolve() == (tmp_path / "kick.wav").resolve()


def test_locate_search_directories_in_order(tmp_path: Path):
    first = tmp_path / "first"
    second = tmp_path / "second"
    make_sample(first / "drums" / "snare.wav")
    make_sample(second / "drums" / "snare.wav")

    assert locate("drums/snare.wav", [tmp_path / "empty", first, second]) == (first / "drums" / "snare.wav")
    assert locate("drums/snare.wav", [second, first]) == (second / "drums" / "snare.wav")


def test_locate_not_found(tmp_path: Path):
    assert locate("nowhere.wav", [tmp_path]) is None


def test_resolver_warns_about_missing_files(tmp_path: Path, caplog):
    make_sample(tmp_path / "a.wav")
    resolver = ResourceResolver([tmp_path])

    with caplog.at_level("WARNING"):
        entries = resolver.resolve(["a.wav", "gone.wav"])

    assert entries[0].found and entries[0].source == tmp_path / "a.wav"
    assert not entries[1].found
    assert "gone.wav" in caplog.text


def test_locate_absolute_path_below_search_directory(tmp_path: Path):
    sounds = tmp_path / "sounds"
    kick = make_sample(sounds / "no-such-user" / "alice" / "kick.wav")

    assert locate("/no-such-user/alice/kick.wav", [tmp_path / "empty", sounds]) == kick


def test_locate_windows_path_below_search_directory(tmp_path: Path):
    pad = make_sample(tmp_path / "Samples" / "pad.wav")

    assert locate("C:\\Samples\\pad.wav", [tmp_path]) == pad


def test_missing_files_do_not_take_a_name(tmp_path: Path):
    found = make_sample(tmp_path / "b" / "x.wav")
    resolver = ResourceResolver([tmp_path])

    entries = resolver.resolve(["/no-such-dir/gone/x.wav", str(found)])

    assert entries[0].destination_name is None
    assert entries[1].destination_name == "x.wav"
    assert entries[1].suffix is None

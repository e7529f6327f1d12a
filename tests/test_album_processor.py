import pytest

from msr_cli.core.album_processor import ProcessOutcome
from msr_cli.exceptions import ApiError, InvalidDataError
from msr_cli.models.catalog import Album, Song

from tests.fakes import FakeCatalog, FakeTagger, http_error, make_album, make_song


def album_dir(root, name="001 - Album"):
    return root / name


@pytest.mark.asyncio
async def test_unavailable_album_writes_nothing(make_processor, library_root):
    catalog = FakeCatalog(details={"1": None})
    processor = make_processor(catalog)

    outcome = await processor.process(Album(cid="1", name="Album"), 1)

    assert outcome is ProcessOutcome.UNAVAILABLE
    assert list(library_root.iterdir()) == []
    assert catalog.download_requests == []


@pytest.mark.asyncio
async def test_album_without_identifier_is_rejected(make_processor):
    with pytest.raises(InvalidDataError):
        await make_processor(FakeCatalog()).process(Album(cid="", name="?"), 1)


@pytest.mark.asyncio
async def test_album_layout(make_processor, library_root, tagger):
    songs = [
        make_song("a", "A", lyric_url="https://cdn.test/a.lrc"),
        Song(cid="", name="Broken"),
        make_song("c", "C/D", source_url="https://cdn.test/c.wav?x=1"),
    ]
    catalog = FakeCatalog(
        details={
            "1": make_album(
                "1",
                "Album",
                songs,
                intro="Intro",
                cover_url="https://cdn.test/cover.png",
                cover_de_url="https://cdn.test/cover_de",
            )
        },
        songs={"a": songs[0], "c": songs[2]},
    )

    outcome = await make_processor(catalog).process(
        Album(cid="1", name="Album", artistes=["X"]), 1
    )

    assert outcome is ProcessOutcome.COMPLETED
    directory = album_dir(library_root)
    assert sorted(p.name for p in directory.iterdir()) == [
        "01.A.lrc",
        "01.A.mp3",
        "02.C_D.wav",
        "Album Cover.png",
        "Cover.jpg",
        "info.txt",
    ]
    info = (directory / "info.txt").read_text(encoding="utf-8")
    assert "Album Artists: X" in info
    assert "- 02. <unknown: missing data>" in info
    assert "- 03. C/D" in info

    assert [(c["file"], c["track"], c["total"]) for c in tagger.calls] == [
        ("01.A.mp3", 1, 2),
        ("02.C_D.wav", 2, 2),
    ]
    assert {c["cover"] for c in tagger.calls} == {"Album Cover.png"}


@pytest.mark.asyncio
async def test_song_detail_failure_falls_back_to_stub(make_processor, library_root):
    stub = make_song("a", "Stub Name")
    catalog = FakeCatalog(
        details={"1": make_album("1", "Album", [stub, make_song("b", "B")])},
        songs={"a": ApiError("gone", code=404), "b": None},
    )
    processor = make_processor(catalog)

    assert await processor.process(Album(cid="1"), 1) is ProcessOutcome.COMPLETED

    names = sorted(p.name for p in album_dir(library_root).iterdir())
    assert "01.Stub Name.mp3" in names
    assert "02.B.mp3" in names
    assert processor.stats.songs_detail_fallback == 2


@pytest.mark.asyncio
async def test_song_detail_replaces_stub(make_processor, library_root):
    catalog = FakeCatalog(
        details={"1": make_album("1", "Album", [Song(cid="a", name="A")])},
        songs={"a": make_song("a", "A", source_url="https://cdn.test/a.flac")},
    )

    await make_processor(catalog).process(Album(cid="1"), 1)

    assert (album_dir(library_root) / "01.A.flac").is_file()


@pytest.mark.asyncio
async def test_invalid_songs_are_not_fetched(make_processor):
    catalog = FakeCatalog(
        details={"1": make_album("1", "Album", [Song(cid="", name="Broken")])}
    )

    await make_processor(catalog).process(Album(cid="1"), 1)

    assert catalog.song_requests == []


@pytest.mark.asyncio
async def test_at_most_five_songs_download_at_once(make_processor):
    songs = [make_song(f"s{i}", f"Song {i}") for i in range(12)]
    catalog = FakeCatalog(
        details={"1": make_album("1", "Album", songs)},
        songs={s.cid: s for s in songs},
        delay=0.01,
    )

    await make_processor(catalog).process(Album(cid="1"), 1)

    assert len(catalog.download_requests) == 12
    assert 1 < catalog.max_in_flight <= 5


@pytest.mark.asyncio
async def test_failed_file_does_not_stop_album(make_processor, library_root):
    songs = [make_song("a", "A"), make_song("b", "B")]
    bad_url = songs[0].source_url
    catalog = FakeCatalog(
        details={"1": make_album("1", "Album", songs, cover_url="https://cdn.test/c.jpg")},
        songs={s.cid: s for s in songs},
        assets={
            bad_url: http_error(bad_url, 500),
            "https://cdn.test/c.jpg": http_error("https://cdn.test/c.jpg"),
        },
    )
    processor = make_processor(catalog)

    assert await processor.process(Album(cid="1"), 1) is ProcessOutcome.COMPLETED

    assert sorted(p.name for p in album_dir(library_root).iterdir()) == [
        "02.B.mp3",
        "info.txt",
    ]
    assert processor.stats.files_failed == 2


@pytest.mark.asyncio
async def test_tagging_failure_does_not_stop_album(make_processor):
    songs = [make_song("a", "A"), make_song("b", "B")]
    catalog = FakeCatalog(
        details={"1": make_album("1", "Album", songs)},
        songs={s.cid: s for s in songs},
    )
    tagger = FakeTagger(fail_for=("01.A.mp3",))
    processor = make_processor(catalog, tagger)

    assert await processor.process(Album(cid="1"), 1) is ProcessOutcome.COMPLETED

    assert [c["file"] for c in tagger.calls] == ["02.B.mp3"]
    assert processor.stats.tags_failed == 1
    assert processor.stats.files_tagged == 1


@pytest.mark.asyncio
async def test_tagging_can_be_disabled(make_processor, config, tagger):
    config.tag_files = False
    catalog = FakeCatalog(details={"1": make_album("1", "Album", [make_song("a", "A")])})

    await make_processor(catalog).process(Album(cid="1"), 1)

    assert tagger.calls == []


@pytest.mark.asyncio
async def test_song_without_source_keeps_lyrics_and_track_number(
    make_processor, library_root, tagger
):
    songs = [
        make_song("a", "A", source_url=None, lyric_url="https://cdn.test/a.lrc"),
        make_song("b", "B"),
    ]
    catalog = FakeCatalog(
        details={"1": make_album("1", "Album", songs)},
        songs={s.cid: s for s in songs},
    )

    await make_processor(catalog).process(Album(cid="1"), 1)

    assert sorted(p.name for p in album_dir(library_root).iterdir()) == [
        "01.A.lrc",
        "02.B.mp3",
        "info.txt",
    ]
    assert catalog.download_requests.count("https://cdn.test/a.lrc") == 1
    assert [(c["file"], c["track"], c["total"]) for c in tagger.calls] == [
        ("02.B.mp3", 2, 2)
    ]

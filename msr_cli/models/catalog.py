"""
Pydantic models for the records returned by the Monster Siren catalog API.
"""

from typing import Any, List, Optional, TypeVar

from pydantic import BaseModel, Field, field_validator

T = TypeVar("T")


def first_present(*candidates: Optional[List[T]]) -> List[T]:
    """Returns the first non-empty candidate list, or an empty list."""
    for candidate in candidates:
        if candidate:
            return list(candidate)
    return []


class CatalogModel(BaseModel):
    """Fields and configuration shared by every catalog record."""

    cid: str = ""
    name: str = ""

    class Config:
        """Pydantic model configuration."""

        populate_by_name = True

    @field_validator("cid", "name", mode="before")
    @classmethod
    def coerce_missing_text(cls, v: Any) -> Any:
        """The catalog sends null for identifiers and names it does not know."""
        return "" if v is None else v

    def is_valid(self) -> bool:
        return bool(self.cid)


class Song(CatalogModel):
    """A single song, either as an album track stub or a full detail record."""

    album_cid: Optional[str] = Field(default=None, alias="albumCid")
    source_url: Optional[str] = Field(default=None, alias="sourceUrl")
    lyric_url: Optional[str] = Field(default=None, alias="lyricUrl")
    mv_url: Optional[str] = Field(default=None, alias="mvUrl")
    mv_cover_url: Optional[str] = Field(default=None, alias="mvCoverUrl")
    artists: Optional[List[str]] = None
    artistes: Optional[List[str]] = None

    def get_artists(self) -> List[str]:
        """The song endpoints use two spellings for the same field."""
        return first_present(self.artists, self.artistes)


class Album(CatalogModel):
    """
    An album record. The album list endpoint returns the summary form; the
    detail endpoint adds the introduction, covers and song list.
    """

    intro: Optional[str] = None
    belong: Optional[str] = None
    cover_url: Optional[str] = Field(default=None, alias="coverUrl")
    cover_de_url: Optional[str] = Field(default=None, alias="coverDeUrl")
    artistes: Optional[List[str]] = None
    songs: Optional[List[Song]] = None

    def get_artistes(self) -> List[str]:
        return list(self.artistes or [])

    def get_songs(self) -> List[Song]:
        return list(self.songs or [])

    def valid_songs(self) -> List[Song]:
        """Songs that get a track number, files and tags, in album order."""
        return [song for song in self.get_songs() if song.is_valid()]

    def with_artist_fallback(self, *fallbacks: "Album") -> "Album":
        """
        Returns a copy whose artist list is the first non-empty one among this
        album and the given fallbacks.
        """
        artistes = first_present(
            self.artistes, *(fallback.artistes for fallback in fallbacks)
        )
        return self.model_copy(update={"artistes": artistes or self.artistes})


# The album list endpoint returns summary-form albums.
CatalogEntry = Album

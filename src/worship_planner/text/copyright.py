"""Copyright attribution blocks for bulletin song credits.

The output is pasted verbatim into bulletins, so punctuation matters:

    "Amazing Grace" Words by John Newton. Music by Edwin Excell.
    Public Domain.
    Used by permission. CCLI Streaming License 1564484.
"""

from __future__ import annotations

from typing import Optional

from worship_planner.pco.models import PlanItem, Song, song_for_item

DEFAULT_LICENSE_NUMBER = "1564484"


def license_trailer(license_number: str = DEFAULT_LICENSE_NUMBER) -> str:
    return f"Used by permission. CCLI Streaming License {license_number}."


def format_author_line(author: Optional[str]) -> str:
    """Turn a Planning Center author string into a words/music credit.

    Three or more comma-separated names: the first two wrote the words,
    the third the music. Otherwise names are split on " and ".
    """
    author = author or ""
    comma_authors = [a.strip() for a in author.split(",")]
    if len(comma_authors) >= 3:
        words = " and ".join(comma_authors[:2])
        return f"Words by {words}. Music by {comma_authors[2]}"

    authors = [a.strip() for a in author.split(" and ")]
    if len(authors) == 1:
        return f"Words and Music by {authors[0] or 'Unknown'}"
    words_author = authors[0] or "Unknown"
    music_author = authors[1] or words_author
    return f"Words by {words_author}. Music by {music_author}"


def format_copyright_line(copyright: Optional[str], admin: Optional[str] = None) -> str:
    """``© 1985 ABC Music. Admin. by XYZ.`` or ``Public Domain.``"""
    line = (copyright or "").strip()
    if not line.endswith("."):
        line += "."
    if line.lower().rstrip(".") != "public domain":
        line = f"© {line}"
    if admin and admin.strip():
        line += f" Admin. by {admin}"
    if not line.endswith("."):
        line += "."
    return line


def format_copyright_text(
    title: str,
    author: Optional[str],
    copyright: Optional[str],
    admin: Optional[str] = None,
    license_number: str = DEFAULT_LICENSE_NUMBER,
) -> str:
    """Three-line attribution block for one song."""
    return "\n".join([
        f'"{title}" {format_author_line(author)}.',
        format_copyright_line(copyright, admin),
        license_trailer(license_number),
    ])


def song_copyright_text(song: Song, license_number: str = DEFAULT_LICENSE_NUMBER) -> str:
    return format_copyright_text(
        song.title, song.author, song.copyright, song.admin, license_number,
    )


def plan_copyright_text(
    items: list[PlanItem],
    songs: list[Song],
    license_number: str = DEFAULT_LICENSE_NUMBER,
) -> str:
    """Attribution blocks for every song in a plan, in service order.

    Songs without an included song record are skipped.
    """
    blocks = []
    for item in sorted((i for i in items if i.is_song), key=lambda i: i.sequence):
        song = song_for_item(item, songs)
        if song is None:
            continue
        blocks.append(song_copyright_text(song, license_number))
    return "\n\n".join(blocks)

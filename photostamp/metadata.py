"""Carry, filter and strip metadata tags across transforms."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, MutableMapping

from PIL import ExifTags, Image

from .raster import RESOLUTION_TAGS, TagId

# Sub-IFD pointers are structural; the tag dict stores the flattened entries instead.
_IFD_POINTERS = frozenset({ExifTags.IFD.Exif, ExifTags.IFD.GPSInfo, ExifTags.IFD.Interop})
GPS_TAG_MAX = 0x1F


def clear(tags: MutableMapping[int, object], keep: Iterable[int] = frozenset()) -> None:
    """Remove every tag whose id is not in keep."""
    keep_ids = {int(tag_id) for tag_id in keep}
    for tag_id in [tag_id for tag_id in tags if tag_id not in keep_ids]:
        del tags[tag_id]


def copy_all(source: Mapping[int, object], dest: MutableMapping[int, object]) -> None:
    """Copy every tag of source into dest, overwriting tags with the same id."""
    for tag_id, value in source.items():
        dest[int(tag_id)] = value


def strip_resolution_tags(tags: MutableMapping[int, object]) -> None:
    # Stale resolution values make text drawn later scale against the wrong DPI.
    for tag_id in RESOLUTION_TAGS:
        tags.pop(int(tag_id), None)


def carry_forward(source: Mapping[int, object]) -> dict[int, object]:
    """Tag set for the output of a geometric transform."""
    tags: dict[int, object] = {}
    copy_all(source, tags)
    strip_resolution_tags(tags)
    return tags


def _in_exif_ifd(tag_id: int) -> bool:
    return tag_id >= 0x8000 and tag_id != TagId.COPYRIGHT


def _in_gps_ifd(tag_id: int) -> bool:
    # GPS ids sit below every IFD0 id.
    return tag_id <= GPS_TAG_MAX


def tags_from_exif(exif: Image.Exif) -> dict[int, object]:
    """Flatten IFD0, the Exif sub-IFD and the GPS sub-IFD into one tag dict."""
    tags: dict[int, object] = {}
    for tag_id, value in exif.items():
        if tag_id in _IFD_POINTERS:
            continue
        tags[int(tag_id)] = value
    for group in (ExifTags.IFD.Exif, ExifTags.IFD.GPSInfo):
        for tag_id, value in exif.get_ifd(group).items():
            if tag_id in _IFD_POINTERS:
                continue
            tags[int(tag_id)] = value
    return tags


def tags_to_exif(tags: Mapping[int, object]) -> Image.Exif:
    exif = Image.Exif()
    sub_ifd: dict[int, object] = {}
    gps_ifd: dict[int, object] = {}
    for tag_id, value in tags.items():
        tag_id = int(tag_id)
        if _in_gps_ifd(tag_id):
            gps_ifd[tag_id] = value
        elif _in_exif_ifd(tag_id):
            sub_ifd[tag_id] = value
        else:
            exif[tag_id] = value
    # A dict value under a pointer tag is written as a nested IFD.
    if sub_ifd:
        exif[ExifTags.IFD.Exif] = sub_ifd
    if gps_ifd:
        exif[ExifTags.IFD.GPSInfo] = gps_ifd
    return exif

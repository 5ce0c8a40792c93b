"""Result reconciliation - merge track lists from several sources into one.

Hey future me - this is the dedup/merge step behind /api/songs/search! It gets the
cached local tracks and the fresh provider tracks (in that order) and must return
each song exactly once. Rules, in order of importance:

1. Identity: externalId when present, else normalized (title, artist, album).
2. Collision on the same key: the stored track survives (first write wins) UNLESS the
   newcomer carries the preferred source tag ("itunes" by default) and the stored one
   doesn't. A replacement keeps the original slot.
3. An id-less track never sits next to an id-bearing track with the same
   (title, artist, album): the id-bearing one wins, whichever arrived first.
4. Output order: id-bearing tracks first, then the rest, each group in arrival order.
   Nothing numeric (popularity, duration, ids) ever affects ordering.
5. max_results truncates last.

Pure function: no network, no storage, no validation (is_valid_track is the
caller's business).
"""

import logging
from collections import Counter
from collections.abc import Iterable, Sequence

from riffus.domain.entities import IdentityKey, Track, TrackSource

logger = logging.getLogger(__name__)


def _prefers(new: Track, stored: Track, preferred_source: TrackSource) -> bool:
    return new.source == preferred_source and stored.source != preferred_source


def reconcile(
    sources: Sequence[Iterable[Track]],
    max_results: int | None = None,
    preferred_source: TrackSource = TrackSource.ITUNES,
) -> list[Track]:
    """Merge track sequences into one deduplicated, ordered list.

    Args:
        sources: Input sequences in priority order (e.g. [cached, remote])
        max_results: Optional final truncation
        preferred_source: Source tag that may override an earlier duplicate

    Returns:
        Tracks with unique identity keys, id-bearing first
    """
    # None marks an id-less slot evicted by a later id-bearing track
    slots: list[Track | None] = []
    slot_by_key: dict[IdentityKey, int] = {}
    # fallback tuple -> number of id-bearing tracks currently holding it
    id_bearing_tuples: Counter[IdentityKey] = Counter()

    def claim_tuple(fallback: IdentityKey, index: int) -> None:
        # An id-less slot with the same tuple is merged into the id-bearing track
        idless_index = slot_by_key.pop(fallback, None)
        if idless_index is not None and idless_index != index:
            slots[idless_index] = None
        id_bearing_tuples[fallback] += 1

    seen = 0
    for source in sources:
        for track in source:
            seen += 1
            key = track.identity_key
            fallback = track.fallback_key

            if key in slot_by_key:
                index = slot_by_key[key]
                stored = slots[index]
                if stored is None or not _prefers(track, stored, preferred_source):
                    continue
                slots[index] = track
                if track.has_external_id and fallback != stored.fallback_key:
                    id_bearing_tuples[stored.fallback_key] -= 1
                    if id_bearing_tuples[stored.fallback_key] <= 0:
                        del id_bearing_tuples[stored.fallback_key]
                    claim_tuple(fallback, index)
                continue

            if not track.has_external_id:
                if id_bearing_tuples[fallback] > 0:
                    # An id-bearing record already represents this song
                    continue
                slot_by_key[key] = len(slots)
                slots.append(track)
                continue

            # Id-bearing newcomer: take over an id-less slot with the same tuple, if any
            if fallback in slot_by_key:
                index = slot_by_key[fallback]
                slots[index] = track
            else:
                index = len(slots)
                slots.append(track)
            slot_by_key[key] = index
            claim_tuple(fallback, index)

    # sorted() is stable, so arrival order survives inside each group
    merged = sorted(
        (t for t in slots if t is not None), key=lambda t: 0 if t.has_external_id else 1
    )
    if max_results is not None:
        merged = merged[: max(max_results, 0)]

    logger.debug(
        "Reconciled %d tracks from %d sources into %d unique",
        seen,
        len(sources),
        len(merged),
    )
    return merged

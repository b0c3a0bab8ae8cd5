"""In-memory audio player session: a playlist with a current-track cursor."""

from __future__ import annotations

import logging
import random
import uuid
from datetime import datetime

from aperio.config import DEFAULT_AUDIO_POOL
from aperio.generate.script import CHARACTERS, format_duration
from aperio.models import AudioTrack, ContentRequest, Script
from aperio.templating import humanize

logger = logging.getLogger(__name__)

IDLE = "idle"
PLAYING = "playing"
PAUSED = "paused"


class AudioSession:
    """Playback state for one listener.

    Next/previous move by playlist position without wrapping and do nothing
    at either end. A current track outside the playlist steps forward to
    the first entry and has nothing before it.
    """

    def __init__(self):
        self.playlist: list[AudioTrack] = []
        self.current: AudioTrack | None = None
        self.state = IDLE
        self.visible = False

    def _index(self) -> int:
        if self.current is None:
            return -1
        for i, track in enumerate(self.playlist):
            if track.id == self.current.id:
                return i
        return -1

    def play_track(self, track: AudioTrack) -> None:
        self.current = track
        self.state = PLAYING
        self.visible = True
        logger.debug("Playing %s (%s)", track.title, track.audio_url)

    def pause(self) -> None:
        if self.state == PLAYING:
            self.state = PAUSED

    def resume(self) -> None:
        if self.state == PAUSED and self.current is not None:
            self.state = PLAYING

    def add_to_playlist(self, tracks: AudioTrack | list[AudioTrack]) -> None:
        if isinstance(tracks, AudioTrack):
            tracks = [tracks]
        self.playlist.extend(tracks)

    def play_next(self) -> None:
        if self.current is None:
            return
        index = self._index()
        if index + 1 >= len(self.playlist):
            return
        self.current = self.playlist[index + 1]

    def play_previous(self) -> None:
        index = self._index()
        if index <= 0:
            return
        self.current = self.playlist[index - 1]

    def clear_playlist(self) -> None:
        self.playlist = []
        self.current = None
        self.state = IDLE
        self.visible = False

    def play_all(self, tracks: list[AudioTrack]) -> None:
        """Replace the playlist with ``tracks`` and start the first one."""
        self.clear_playlist()
        self.add_to_playlist(tracks)
        if tracks:
            self.play_track(tracks[0])

    def hide(self) -> None:
        self.visible = False

    def show(self) -> None:
        if self.current is not None:
            self.visible = True

    @property
    def has_next(self) -> bool:
        return self.current is not None and self._index() < len(self.playlist) - 1

    @property
    def has_previous(self) -> bool:
        return self._index() > 0


def create_audio_track(
    script: Script,
    request: ContentRequest,
    pool: list[str] | None = None,
    rng: random.Random | None = None,
) -> AudioTrack:
    """Wrap a script as a playable track.

    The audio URL is a placeholder drawn from ``pool``; no speech is
    synthesized from the script.
    """
    pool = pool or DEFAULT_AUDIO_POOL
    rng = rng or random.Random()
    notes = script.production_notes

    target = notes.get("target_duration_seconds")
    names = [v["name"] for v in notes.get("voices", [])] or [
        c["name"] for c in CHARACTERS.values()
    ]

    return AudioTrack(
        id=f"track-{uuid.uuid4().hex[:12]}",
        title=f"{request.topic} - {humanize(request.content_type)}",
        audio_url=rng.choice(pool),
        duration=format_duration(target) if target else "3:00",
        characters=names,
        description=f"AI-generated financial journalism: {request.topic}",
        content_type=request.content_type,
        metadata={
            "generated_at": script.generated_at.isoformat(),
            "word_count": notes.get("total_word_count", 0),
            "estimated_duration": notes.get("estimated_duration_seconds", 180),
            "complexity": request.complexity,
            "topic": request.topic,
            "created_at": datetime.utcnow().isoformat(),
        },
    )

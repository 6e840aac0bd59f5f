import logging
import re
from enum import Enum
from typing import Callable, List, NamedTuple, Optional

from .fetcher import FetchResult

VIDEO_PATH_PATTERN = re.compile(r'videos/(\d+)')
VIDEO_ID_PATTERN = re.compile(r'^\d+$')


def extract_video_id(location: Optional[str]) -> Optional[str]:
    """Return the video id of a page location (URL or path), or a bare numeric id."""
    if not location:
        return None
    text = location.strip()
    if VIDEO_ID_PATTERN.match(text):
        return text
    match = VIDEO_PATH_PATTERN.search(text)
    return match.group(1) if match else None


class WatcherState(Enum):
    NO_VIDEO = 'no_video'
    IDLE = 'idle'
    TRACKING = 'tracking'


class FetchTicket(NamedTuple):
    video_id: str
    token: int


class VideoWatcher:
    """Tracks which video is active, driven by navigation events.

    ``NO_VIDEO`` until a location with a video id is seen, ``IDLE`` while a
    video is active without data, ``TRACKING`` once a fetch for it started.
    Changing video drops the retained result, revokes the fetch in flight and
    notifies listeners.
    """

    def __init__(self):
        self.state = WatcherState.NO_VIDEO
        self.video_id: Optional[str] = None
        self.result: Optional[FetchResult] = None
        self._fetch_token: Optional[int] = None
        self._fetch_count = 0
        self._listeners: List[Callable[['VideoWatcher'], None]] = []

    def subscribe(self, listener: Callable[['VideoWatcher'], None]):
        self._listeners.append(listener)

    def current_video_id(self) -> Optional[str]:
        return self.video_id

    @property
    def fetching(self) -> bool:
        return self._fetch_token is not None

    def navigate(self, location: Optional[str]) -> WatcherState:
        video_id = extract_video_id(location)
        if video_id == self.video_id:
            return self.state

        logging.debug(f'Active video changed: {self.video_id} -> {video_id}')
        self.video_id = video_id
        self.result = None
        self._fetch_token = None
        self.state = WatcherState.IDLE if video_id else WatcherState.NO_VIDEO
        self._notify()
        return self.state

    def begin_fetch(self) -> Optional[FetchTicket]:
        """Start tracking the active video.

        Returns None when there is no video or a fetch for it is already in
        flight.
        """
        if self.state is WatcherState.NO_VIDEO or self.fetching:
            return None
        self._fetch_count += 1
        self._fetch_token = self._fetch_count
        self.state = WatcherState.TRACKING
        return FetchTicket(self.video_id, self._fetch_token)

    def owns(self, ticket: Optional[FetchTicket]) -> bool:
        """True while ``ticket`` is the fetch in flight for the active video."""
        return (ticket is not None and ticket.token == self._fetch_token
                and ticket.video_id == self.video_id)

    def complete(self, ticket: FetchTicket, result: Optional[FetchResult]) -> bool:
        """Store a finished fetch. Returns False when it is stale or failed."""
        if not self.owns(ticket):
            logging.info(f'Ignoring stale result for video {ticket.video_id}, active video is {self.video_id}')
            return False
        self._fetch_token = None
        if result is None:
            if self.result is None:
                self.state = WatcherState.IDLE
            return False
        self.result = result
        self.state = WatcherState.TRACKING
        self._notify()
        return True

    def _notify(self):
        for listener in list(self._listeners):
            listener(self)

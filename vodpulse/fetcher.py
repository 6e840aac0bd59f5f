import asyncio
import contextlib
import logging
from typing import Callable, List, NamedTuple, Optional

import httpx

from .crawler import Segment, crawl_segment
from .gql import GqlError, call, create_shared_client, dig

CONCURRENCY = 6
REPORT_INTERVAL = 0.5

DURATION_QUERY = 'query V($id:ID!){video(id:$id){lengthSeconds}}'

ProgressCallback = Callable[[float, float], None]


class FetchResult(NamedTuple):
    timestamps: List[float]
    duration: float


def split_segments(duration: float, count: int) -> List[Segment]:
    """Split ``[0, duration)`` into ``count`` contiguous segments of equal width.

    The last segment always ends exactly at ``duration``.
    """
    if count < 1:
        raise ValueError(f'Segment count must be positive, got {count}')
    width = duration / count
    segments = []
    for i in range(count):
        start = i * width
        end = duration if i == count - 1 else (i + 1) * width
        segments.append(Segment(start, end))
    return segments


async def fetch_video_duration(client: httpx.AsyncClient, video_id: str) -> Optional[float]:
    data = await call(client, DURATION_QUERY, {'id': video_id})
    try:
        length = dig(data, 'data', 'video', 'lengthSeconds')
    except GqlError as e:
        logging.warning(f'Malformed duration response for video {video_id}: {e}')
        return None
    if not length:
        return None
    try:
        duration = float(length)
    except (TypeError, ValueError):
        logging.warning(f'Unexpected lengthSeconds value for video {video_id}: {length!r}')
        return None
    return duration if duration > 0 else None


async def _report_progress(progress: List[float], duration: float,
                           on_progress: ProgressCallback, interval: float):
    while True:
        await asyncio.sleep(interval)
        try:
            on_progress(sum(progress), duration)
        except Exception as e:
            logging.warning(f'Progress callback failed: {e}')


async def fetch_comment_timestamps(client: httpx.AsyncClient, video_id: str,
                                   on_progress: Optional[ProgressCallback] = None,
                                   current_video_id: Optional[Callable[[], Optional[str]]] = None,
                                   concurrency: int = CONCURRENCY,
                                   report_interval: float = REPORT_INTERVAL,
                                   **crawl_options) -> Optional[FetchResult]:
    """Fetch every comment timestamp of a video with concurrent segment crawlers.

    Returns None when the video has no duration or when it stopped being the
    active video before all segments completed. Partial results are never
    returned.
    """
    if current_video_id is None:
        def current_video_id():
            return video_id

    duration = await fetch_video_duration(client, video_id)
    if not duration:
        logging.error(f'Could not resolve duration for video {video_id}.')
        return None

    segments = split_segments(duration, concurrency)
    progress = [0.0] * len(segments)
    logging.info(f'Fetching comments of video {video_id} ({duration:.0f}s) with {len(segments)} workers...')

    reporter = None
    if on_progress is not None:
        reporter = asyncio.create_task(_report_progress(progress, duration, on_progress, report_interval))

    try:
        results = await asyncio.gather(*(
            crawl_segment(client, video_id, segment, slot, progress, current_video_id, **crawl_options)
            for slot, segment in enumerate(segments)
        ))
    finally:
        if reporter is not None:
            reporter.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await reporter

    if any(result is None for result in results):
        logging.warning(f'Fetch of video {video_id} was cancelled, discarding partial data.')
        return None

    timestamps = sorted(t for result in results for t in result)
    logging.info(f'Fetched {len(timestamps)} comments for video {video_id}.')
    return FetchResult(timestamps, duration)


def fetch_video_comments(video_id: str, client_id: Optional[str] = None, auth_token: Optional[str] = None,
                         on_progress: Optional[ProgressCallback] = None,
                         current_video_id: Optional[Callable[[], Optional[str]]] = None,
                         concurrency: int = CONCURRENCY) -> Optional[FetchResult]:
    """Blocking entry point: run a whole fetch on its own event loop."""
    async def _run():
        async with create_shared_client(client_id, auth_token) as client:
            return await fetch_comment_timestamps(
                client, video_id,
                on_progress=on_progress,
                current_video_id=current_video_id,
                concurrency=concurrency,
            )

    return asyncio.run(_run())

import asyncio
import logging
import math
from typing import Callable, List, NamedTuple, Optional

import httpx

from .gql import GqlError, dig, post_query

PAGE_LIMIT = 100

# Cursor step over pages without comments, widened after a run of empty pages
EMPTY_STEP = 10
EMPTY_STEP_LONG = 60
EMPTY_PAGES_BEFORE_LONG_STEP = 5

RETRY_DELAY = 1.0

COMMENTS_QUERY = '''query VideoComments($id:ID!,$off:Int,$lim:Int){
  video(id:$id){
    comments(contentOffsetSeconds:$off,first:$lim){
      edges{node{contentOffsetSeconds id}}
    }
  }
}'''


class CommentEvent(NamedTuple):
    id: str
    offset_seconds: float


class Segment(NamedTuple):
    start: float
    end: float


def parse_comment_edges(data: dict) -> List[CommentEvent]:
    """Extract comment events from a VideoComments response.

    A missing video or comment connection is an empty page. Any level with
    the wrong shape, or a node without its id or offset, is a malformed
    response.
    """
    edges = dig(data, 'data', 'video', 'comments', 'edges')
    if edges is None:
        return []
    if not isinstance(edges, list):
        raise GqlError(f'Expected a list of comment edges, got {type(edges).__name__}')

    events = []
    for edge in edges:
        node = dig(edge, 'node')
        if not isinstance(node, dict):
            raise GqlError(f'Malformed comment edge {edge!r}')
        try:
            events.append(CommentEvent(str(node['id']), float(node['contentOffsetSeconds'])))
        except (KeyError, TypeError, ValueError) as e:
            raise GqlError(f'Malformed comment node {node!r}: {e}') from e
    return events


async def fetch_comment_page(client: httpx.AsyncClient, video_id: str, offset: float,
                             limit: int = PAGE_LIMIT) -> List[CommentEvent]:
    data = await post_query(
        client,
        COMMENTS_QUERY,
        {'id': video_id, 'off': int(math.floor(offset)), 'lim': limit},
        operation_name='VideoComments',
    )
    return parse_comment_edges(data)


async def crawl_segment(client: httpx.AsyncClient, video_id: str, segment: Segment, slot: int,
                        progress: List[float], current_video_id: Callable[[], Optional[str]],
                        page_limit: int = PAGE_LIMIT,
                        retry_delay: float = RETRY_DELAY) -> Optional[List[float]]:
    """Collect the offsets of every comment in ``[segment.start, segment.end)``.

    Writes the seconds advanced within the segment to ``progress[slot]`` and
    returns None as soon as ``video_id`` stops being the active video.
    Offsets are returned unordered, one per comment id.
    """
    start, end = segment
    offset = start
    empty = 0
    seen = set()
    stamps = []

    while offset < end:
        if current_video_id() != video_id:
            logging.info(f'Video {video_id} is no longer active, stopping segment {slot}')
            return None

        try:
            events = await fetch_comment_page(client, video_id, offset, page_limit)
        except (httpx.HTTPError, GqlError) as e:
            logging.warning(f'Segment {slot}: page at {offset:.0f}s failed, retrying: {e}')
            await asyncio.sleep(retry_delay)
            continue

        if not events:
            empty += 1
            step = EMPTY_STEP_LONG if empty > EMPTY_PAGES_BEFORE_LONG_STEP else EMPTY_STEP
            offset += min(step, end - offset)
            progress[slot] = offset - start
            continue

        empty = 0
        offsets = [event.offset_seconds for event in events]
        min_t = min(offsets)
        max_t = max(offsets)

        for event in events:
            if start <= event.offset_seconds < end and event.id not in seen:
                seen.add(event.id)
                stamps.append(event.offset_seconds)

        # Pages are assumed to be ordered by offset; a full page sitting on a
        # single second cannot be paginated by time any further.
        next_offset = max_t
        if len(events) >= page_limit and min_t == max_t:
            next_offset = max_t + 1
        if next_offset <= offset:
            logging.debug(f'Segment {slot}: cursor did not advance past {offset}, forcing a step')
            next_offset = offset + 1

        offset = next_offset
        progress[slot] = min(offset, end) - start

    logging.debug(f'Segment {slot} [{start:.0f}s, {end:.0f}s) done: {len(stamps)} comments')
    return stamps

import argparse
import logging
import shutil

import tqdm

from .fetcher import CONCURRENCY, fetch_video_comments
from .histogram import BAR_WIDTH, build_histogram
from .render import DEFAULT_TEXT_ROWS, render_text
from .utils import format_elapsed, get_logs_path, initialize_logger
from .watcher import extract_video_id


def parse_arguments():
    parser = argparse.ArgumentParser(
        description='vodpulse - chat activity graph for recorded Twitch videos.'
    )
    parser.add_argument(
        'url',
        help='Video link such as https://www.twitch.tv/videos/1234567890, or the bare video id.'
    )
    parser.add_argument(
        '--client-id',
        help='[Optional] Client-Id header value. Defaults to the public web client id.'
    )
    parser.add_argument(
        '--auth-token',
        help='[Optional] OAuth token for accessing subscriber-only videos.'
    )
    parser.add_argument(
        '--concurrency',
        type=int,
        default=CONCURRENCY,
        help=f'Number of parallel segment workers. Default is {CONCURRENCY}.'
    )
    parser.add_argument(
        '--width',
        type=int,
        default=None,
        help='Display width of the graph; one bar per 2 units. Defaults to the terminal width.'
    )
    parser.add_argument(
        '--rows',
        type=int,
        default=DEFAULT_TEXT_ROWS,
        help=f'Height of the terminal graph in lines. Default is {DEFAULT_TEXT_ROWS}.'
    )
    parser.add_argument(
        '--log-level',
        default='INFO',
        help='Logging level (DEBUG, INFO, WARNING, ERROR).'
    )
    parser.add_argument(
        '--log-file',
        default=None,
        help='Path of the log file. Defaults to logs/vodpulse.log.'
    )
    return parser.parse_args()


def _display_width(requested):
    if requested:
        return requested
    return shutil.get_terminal_size().columns * BAR_WIDTH


def main():
    args = parse_arguments()

    initialize_logger(force=False, level=args.log_level, log_file_path=args.log_file or get_logs_path())
    # Silence httpx logs to keep progress bars readable
    logging.getLogger("httpx").setLevel(logging.WARNING)

    video_id = extract_video_id(args.url)
    if video_id is None:
        logging.error('Invalid video link. Expected .../videos/<id> or a numeric id.')
        return 1
    if args.concurrency < 1 or args.rows < 1:
        logging.error('--concurrency and --rows must be positive.')
        return 1

    logging.info(f'Starting fetch: video_id={video_id}')
    try:
        with tqdm.tqdm(total=0, unit='s', desc=f'Video {video_id}') as progress:
            def on_progress(covered, total):
                progress.total = round(total)
                progress.n = round(covered)
                progress.refresh()

            result = fetch_video_comments(
                video_id,
                client_id=args.client_id,
                auth_token=args.auth_token,
                on_progress=on_progress,
                concurrency=args.concurrency,
            )
    except KeyboardInterrupt:
        print("\n\n[!] Interrupted by user. Exiting...")
        return 130
    except Exception as e:
        logging.error(f"An unexpected error occurred: {e}")
        return 1

    if result is None:
        logging.error('Fetch did not complete. Check the video id or try again.')
        return 1

    histogram = build_histogram(result.timestamps, result.duration, _display_width(args.width))
    print(render_text(histogram, rows=args.rows))

    peak = histogram.peak_bin()
    if peak >= 0:
        logging.info(
            f'{len(result.timestamps)} comments over {format_elapsed(result.duration)}, '
            f'busiest around {format_elapsed(peak * histogram.bin_width)} '
            f'({histogram.counts[peak]} comments)'
        )
    else:
        logging.info(f'No comments over {format_elapsed(result.duration)}.')
    return 0


if __name__ == '__main__':
    raise SystemExit(main())

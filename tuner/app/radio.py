"""
Main entry point for Tuner.

This module provides the main() function that loads configuration, builds
the catalog client and Player, and drives the Player from single-line
stdin commands while a printer thread reports statuses.

Commands:
    <n>   play station n
    p     toggle pause
    n     skip track
    s     stop station
    r     report current status
    + / - rate current track
    l     list stations
    q     quit
"""

import argparse
import logging
import logging.handlers
import signal
import sys
import threading
from typing import List, Optional

from tuner.catalog.client import CatalogClient, HttpCatalogClient
from tuner.catalog.local import LocalCatalogClient
from tuner.catalog.models import Station
from tuner.config import TunerConfig
from tuner.errors import ApiError
from tuner.outputs.factory import SINK_MODES
from tuner.playback.player import Player

logger = logging.getLogger(__name__)

HELP = "Commands: <n> play | p pause | n skip | s stop | r report | +/- rate | l list | q quit"


def setup_logging(config: TunerConfig) -> None:
    """Configure root logging; attach a rotation-tolerant file handler when log_file is set."""
    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    if not config.log_file:
        return

    try:
        # Use WatchedFileHandler for rotation tolerance
        handler = logging.handlers.WatchedFileHandler(config.log_file, mode='a')
    except OSError as e:
        logger.warning(f"Cannot open log file {config.log_file}: {e}")
        return
    handler.setFormatter(logging.Formatter('%(asctime)s [%(levelname)s] %(name)s: %(message)s'))

    # Wrap emit to handle write failures gracefully
    original_emit = handler.emit

    def safe_emit(record):
        try:
            original_emit(record)
        except (IOError, OSError):
            # Logging failures degrade silently
            pass

    handler.emit = safe_emit
    logging.getLogger().addHandler(handler)


def build_catalog(config: TunerConfig) -> CatalogClient:
    """
    Create the catalog client selected by config.catalog_mode.

    Raises:
        ApiError: If the catalog cannot be reached or the music root is missing
    """
    if config.catalog_mode == "http":
        client = HttpCatalogClient(
            config.catalog_url,
            username=config.username,
            password=config.password,
            timeout=config.http_timeout_sec,
        )
        client.login()
        return client
    return LocalCatalogClient(config.music_root, playlist_size=config.playlist_size)


def print_stations(stations: List[Station]) -> None:
    if not stations:
        print("No stations.")
        return
    for index, station in enumerate(stations):
        print(f"  {index}) {station}")


def print_statuses(player: Player, stop: threading.Event, interval: float = 0.1) -> None:
    """Printer thread body: print every status until stop is set."""
    while not stop.is_set():
        status = player.next_status()
        if status is None:
            stop.wait(interval)
            continue
        if status.is_playing():
            progress = player.state().progress
            suffix = f" [{progress[0]}/{progress[1]}s]" if progress else ""
            print(f"> {status}{suffix}")
        else:
            print(f"> {status}")


def handle_line(line: str, player: Player, catalog: CatalogClient, stations: List[Station]) -> bool:
    """
    Apply one stdin command.

    Returns:
        False when the user asked to quit, True otherwise
    """
    command = line.strip()
    if not command:
        return True

    if command == "q":
        return False
    if command == "p":
        player.toggle_pause()
    elif command == "n":
        player.skip()
    elif command == "s":
        player.stop()
    elif command == "r":
        player.report()
    elif command == "l":
        try:
            stations[:] = catalog.stations()
        except ApiError as e:
            print(f"Cannot list stations: {e}")
        print_stations(stations)
    elif command in ("+", "-"):
        snapshot = player.state()
        if snapshot.station is None or snapshot.track is None:
            print("Nothing is playing.")
            return True
        try:
            catalog.rate(snapshot.station, snapshot.track, positive=(command == "+"))
            print(f"Rated {snapshot.track} {'up' if command == '+' else 'down'}")
        except ApiError as e:
            print(f"Cannot rate track: {e}")
    elif command.isdigit():
        index = int(command)
        if index >= len(stations):
            print(f"No station {index}")
        else:
            player.play(stations[index])
    else:
        print(HELP)
    return True


def main(args: Optional[List[str]] = None) -> None:
    """
    Main entry point for Tuner.

    Loads configuration, starts the Player and runs the stdin command loop
    until 'q', end of input, SIGINT or SIGTERM.
    """
    parser = argparse.ArgumentParser(description='Tuner - streaming radio player')
    parser.add_argument('--sink', choices=SINK_MODES, help='Output sink mode (overrides TUNER_OUTPUT_SINK_MODE)')
    parser.add_argument('--music-root', help='Music root for the local catalog (overrides TUNER_MUSIC_ROOT)')
    parser.add_argument('--log-level', help='Log level (overrides TUNER_LOG_LEVEL)')
    parsed = parser.parse_args(args)

    try:
        config = TunerConfig.load_config()
        if parsed.sink:
            config.output_sink_mode = parsed.sink
        if parsed.music_root:
            config.music_root = parsed.music_root
        if parsed.log_level:
            config.log_level = parsed.log_level.upper()
        config.validate()
    except ValueError as e:
        parser.error(str(e))

    setup_logging(config)

    try:
        catalog = build_catalog(config)
        stations = catalog.stations()
    except ApiError as e:
        logger.error(f"Cannot open catalog: {e}")
        sys.exit(1)

    player = Player(catalog, config=config)
    stop_printer = threading.Event()
    printer = threading.Thread(
        target=print_statuses,
        args=(player, stop_printer),
        name="status-printer",
        daemon=True,
    )
    printer.start()

    def shutdown() -> None:
        stop_printer.set()
        player.close()
        close_catalog = getattr(catalog, "close", None)
        if close_catalog is not None:
            close_catalog()

    def signal_handler(sig, frame):
        signal_name = "SIGTERM" if sig == signal.SIGTERM else "SIGINT"
        logger.info(f"Received {signal_name} signal - shutting down")
        shutdown()
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    print_stations(stations)
    print(HELP)
    try:
        for line in sys.stdin:
            if not handle_line(line, player, catalog, stations):
                break
    finally:
        shutdown()


if __name__ == "__main__":
    main()

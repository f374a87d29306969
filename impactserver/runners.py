"""Running callbacks later or on an interval in background threads."""

import threading
from typing import Callable


def do_later(delay: float, func: Callable[[], None]) -> threading.Timer:
    """Run func once after delay seconds."""
    timer = threading.Timer(delay, func)
    timer.daemon = True
    timer.start()
    return timer


def do_repeatedly(interval: float, func: Callable[[], None]) -> threading.Event:
    """Run func every interval seconds until the returned event is set."""
    quit_event = threading.Event()

    def loop() -> None:
        while not quit_event.wait(interval):
            func()

    threading.Thread(target=loop, daemon=True).start()
    return quit_event
"""
Console (+ optional file) logging for the attractor app.

Modules are flat and log under their own names (sim, engine, transition...),
so the handlers hang off the root logger. MediaPipe pulls in absl/TF-lite
loggers that chatter at INFO on every model load; those are held at WARNING.
"""
import logging
import sys
from typing import Optional

NOISY_LOGGERS = ("mediapipe", "absl", "tensorflow")

FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    root = logging.getLogger()
    root.setLevel(level)

    # re-running main() in the same process must not double every line
    for h in list(root.handlers):
        root.removeHandler(h)

    formatter = logging.Formatter(FORMAT, datefmt="%H:%M:%S")

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        fh = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        fh.setFormatter(formatter)
        root.addHandler(fh)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logging.getLogger(__name__).debug("Logging at %s", logging.getLevelName(level))

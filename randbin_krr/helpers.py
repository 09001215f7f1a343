import time


class ConfigError(ValueError):
    """Invalid run parameters (rank, bandwidth, kernel, ...)."""


class DataError(RuntimeError):
    """Input data could not be loaded or does not match the declared problem."""


class Timer:
    """
    Wall-clock timer for one block of work.

    with Timer() as t:
        ...
    print(t.elapsed)

    `elapsed` is only valid after the block exits. A timer cannot be re-entered.
    """

    def __init__(self):
        self._start = None
        self._end = None

    def __enter__(self):
        if self._start is not None:
            raise RuntimeError("Timer already started.")
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb):
        self._end = time.perf_counter()
        return False

    @property
    def elapsed(self) -> float:
        if self._start is None or self._end is None:
            raise RuntimeError("Timer has not finished.")
        return self._end - self._start

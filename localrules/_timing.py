import time
from datetime import timedelta


class PerformanceTimer:
    """Context manager class measuring wall clock execution time of a code block
    with time.perf_counter().

    Example:
    >>> with PerformanceTimer() as timer:
    ...     time.sleep(0.5)
    >>> print(timer.milliseconds)
    """

    def __init__(self) -> None:
        self.start_time: float = None
        self.end_time: float = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.end_time = None
        return self

    def __exit__(self, *args, **kwargs):
        self.end_time = time.perf_counter()

    def __str__(self) -> str:
        return str(self.timedelta)

    @property
    def time(self) -> float:
        """
        Returns:
            float: time in seconds, measured until now if the block is still running
        """
        end_time: float = time.perf_counter() if self.end_time is None else self.end_time
        return end_time - self.start_time

    @property
    def timedelta(self) -> timedelta:
        return timedelta(seconds=self.time)

    @property
    def milliseconds(self) -> float:
        return self.time * 1000.0

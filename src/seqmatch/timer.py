import time


class ElapsedTimer:
    """Scoped wall-clock measurement on the high-resolution performance counter."""

    def __init__(self):
        self.t0 = 0.0
        self.t1 = 0.0

    def start(self):
        self.t0 = time.perf_counter()

    def stop(self):
        self.t1 = time.perf_counter()

    def elapsed_time(self) -> float:
        """Seconds between the last start() and stop()."""
        return self.t1 - self.t0

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *exc):
        self.stop()
        return False

import logging
import threading
import time

from tqdm import tqdm

from caimdisc.discretization.errors import Cancelled

progress_logger = logging.getLogger("caimdisc.progress")


class ExecutionMonitor:
    """Reports progress and carries a cooperative cancellation flag.

    Sub monitors created with :meth:`create_sub_monitor` map their own
    ``[0, 1]`` progress into a slice of the parent and share its flag.
    """

    def __init__(self, verbose=False, desc=None, logger=progress_logger):
        self.verbose = verbose
        self.logger = logger
        self._cancel_event = threading.Event()
        self._parent = None
        self._offset = 0.0
        self._scale = 1.0
        self._consumed = 0.0
        self._progress = 0.0
        self.message = None
        self._bar = tqdm(total=1.0, desc=desc, leave=False) if verbose else None

    @property
    def progress(self):
        return self._progress

    def cancel(self):
        self._cancel_event.set()

    @property
    def cancelled(self):
        return self._cancel_event.is_set()

    def check_cancelled(self):
        if self._cancel_event.is_set():
            raise Cancelled()

    def set_progress(self, fraction=None, message=None):
        if fraction is not None:
            fraction = min(max(float(fraction), 0.0), 1.0)
            self._progress = fraction
            if self._parent is not None:
                self._parent._set_absolute(self._offset + self._scale * fraction)
            elif self._bar is not None:
                self._bar.n = fraction
                self._bar.refresh()
        if message is not None:
            self.message = message
            self.logger.debug(message)
            root = self._root()
            if root._bar is not None:
                root._bar.set_postfix_str(message, refresh=True)

    def _set_absolute(self, fraction):
        self.set_progress(fraction)

    def _root(self):
        monitor = self
        while monitor._parent is not None:
            monitor = monitor._parent
        return monitor

    def create_sub_monitor(self, fraction):
        """Child monitor covering the next ``fraction`` of this monitor's range."""
        child = ExecutionMonitor.__new__(ExecutionMonitor)
        child.verbose = self.verbose
        child.logger = self.logger
        child._cancel_event = self._cancel_event
        child._parent = self
        child._offset = self._consumed
        child._scale = float(fraction)
        child._consumed = 0.0
        child._progress = 0.0
        child.message = None
        child._bar = None
        self._consumed += float(fraction)
        return child

    def close(self):
        if self._bar is not None:
            self._bar.close()
            self._bar = None


def _counter(iterable, countevery=100, total=None, logger=progress_logger):
    """Logs a status and timing update to [logger] every [countevery] draws from [iterable].
    """
    start_time = time.time()
    if total is None and hasattr(iterable, "__len__"):
        total = len(iterable)

    for count, thing in enumerate(iterable):
        yield thing
        if not count % countevery:
            current_time = time.time()
            rate = float(count + 1) / (current_time - start_time + 1e-12)
            if total is not None:
                remitems = total - (count + 1)
                remtime = remitems / rate
                logger.debug("%d/%d items complete (%0.2f items/second, %d seconds remaining)"
                             % (count + 1, total, rate, remtime))
            else:
                logger.debug("%d items complete (%0.2f items/second)" % (count + 1, rate))

"""Producer/consumer pipeline that writes rows while they are still being fetched.

The caller's thread runs the producer (the database query); a single writer
thread drains a FIFO pipe and serializes each row as it arrives::

    caller            pipe                 writer thread
    ------            ----                 -------------
    write header
    start writer  ->                       pop (blocks)
    push(row 1)   ->  MoreToCome(row 1) -> write row 1, count
    push(row 2)   ->  MoreToCome(row 2) -> write row 2, count
    finish()      ->  EndOfData         -> stop
    join writer
    read counter
"""

import enum
import logging
import queue
import threading

from tabledump.config import PIPE_SIZE, PUT_POLL_INTERVAL
from tabledump.definition.base import DataRowProvider, StreamingRowProvider
from tabledump.definition.models import (
    Aborted,
    DataRow,
    EndOfData,
    MoreToCome,
    RowIndicator,
    TableDefinition,
)
from tabledump.errors import ConsumerAborted, PipeClosedError
from tabledump.export.writer import CsvSink

logger = logging.getLogger("tabledump")


class RowPipe:
    """Single-producer, single-consumer FIFO of row indicators.

    The producer pushes rows and closes the pipe exactly once, with
    ``finish()`` on success or ``abort()`` on failure. Nothing can be pushed
    after that. The consumer blocks in ``pop()`` until an indicator arrives.
    """

    def __init__(self, maxsize: int = PIPE_SIZE, poll_interval: float = PUT_POLL_INTERVAL) -> None:
        self._queue: queue.Queue = queue.Queue(maxsize)
        self._poll_interval = poll_interval
        self._closed = False
        self._cancelled = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def push(self, row: DataRow) -> None:
        """Queue a row. Raises ``ConsumerAborted`` if the consumer has gone away."""
        if self._closed:
            raise PipeClosedError("Cannot push a row after the end of data")
        self._put(MoreToCome(row))

    def finish(self) -> None:
        """Signal the end of data."""
        if self._closed:
            raise PipeClosedError("End of data was already signalled")
        self._closed = True
        self._put(EndOfData())

    def abort(self, error: BaseException) -> None:
        """Close the pipe after a producer failure. No-op once closed."""
        if self._closed:
            return
        self._closed = True
        try:
            self._put(Aborted(error))
        except ConsumerAborted:
            pass  # nobody left to tell

    def cancel(self) -> None:
        """Called by the consumer when it stops before the end of data."""
        self._cancelled.set()

    def pop(self) -> RowIndicator:
        return self._queue.get()

    def __len__(self) -> int:
        return self._queue.qsize()

    def _put(self, indicator: RowIndicator) -> None:
        while True:
            if self._cancelled.is_set():
                raise ConsumerAborted("Row writer stopped before the end of data")
            try:
                self._queue.put(indicator, timeout=self._poll_interval)
                return
            except queue.Full:
                continue


class RowCounter:
    """Tally of rows written, shared between the writer thread and the caller."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = 0

    def increment(self) -> None:
        with self._lock:
            self._value += 1

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


class ConsumerState(enum.Enum):
    POLLING = "polling"
    DRAINING = "draining"
    TERMINATED = "terminated"


class RowConsumer:
    """Writer thread: drains the pipe into the sink in FIFO order."""

    def __init__(self, pipe: RowPipe, sink: CsvSink, counter: RowCounter) -> None:
        self._pipe = pipe
        self._sink = sink
        self._counter = counter
        self.state = ConsumerState.POLLING
        self.error: Exception | None = None
        self.producer_error: BaseException | None = None
        self._thread = threading.Thread(target=self._run, name="row-writer", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def join(self, timeout: float | None = None) -> None:
        self._thread.join(timeout)

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def _run(self) -> None:
        try:
            while True:
                self.state = ConsumerState.POLLING
                indicator = self._pipe.pop()

                if isinstance(indicator, EndOfData):
                    logger.debug("Writer reached end of data")
                    break
                if isinstance(indicator, Aborted):
                    self.producer_error = indicator.error
                    logger.warning("Writer stopped: producer failed (%s)", indicator.error)
                    break

                self.state = ConsumerState.DRAINING
                self._sink.write_row(indicator.row)
                self._counter.increment()
        except Exception as e:
            logger.error("Row writer failed: %s", e)
            self.error = e
            self._pipe.cancel()
        finally:
            self.state = ConsumerState.TERMINATED


def export_streaming(
    definition: TableDefinition,
    provider: StreamingRowProvider,
    sink: CsvSink,
    pipe: RowPipe | None = None,
) -> int:
    """Export a table through the writer thread. Returns the number of rows written.

    Errors from the query propagate after the writer has been shut down.
    Raises ``ConsumerAborted`` if the writer thread failed.
    """
    data = definition.load_threaded(pipe)
    counter = RowCounter()

    sink.write_header(data.header())

    consumer = RowConsumer(data.pipe, sink, counter)
    consumer.start()
    logger.info("Writer thread started for table %s", data.table_name)

    try:
        data.execute(provider)
    except Exception as e:
        data.pipe.abort(e)
        consumer.join()
        if consumer.error is not None:
            raise ConsumerAborted(f"Row writer failed: {consumer.error}") from consumer.error
        raise

    if not data.pipe.closed:
        logger.warning("Row provider returned without closing the pipe, signalling end of data")
        try:
            data.pipe.finish()
        except ConsumerAborted:
            pass  # writer already stopped, its error is raised below

    logger.info("Database loading completed, waiting for writer thread")
    consumer.join()
    if consumer.error is not None:
        raise ConsumerAborted(f"Row writer failed: {consumer.error}") from consumer.error

    logger.info("Writer thread wrote %d rows", counter.value)
    return counter.value


def export_bulk(definition: TableDefinition, provider: DataRowProvider, sink: CsvSink) -> int:
    """Fetch every row first, then write them all. Returns the number of rows written."""
    data = definition.load(provider)
    sink.write_header(data.header())
    for row in data.rows:
        sink.write_row(row)
    logger.info("Wrote %d rows for table %s", len(data.rows), data.table_name)
    return len(data.rows)

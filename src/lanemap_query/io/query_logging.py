# io/query_logging.py
import json
import logging
import sys

from lanemap_query.query.hooks import NoopHooks


class _QueryJsonFormatter(logging.Formatter):
    """One JSON object per event; a layer/id pair is also rendered as ``prim``."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {"level": record.levelname, "event": record.getMessage(), "logger": record.name}
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(extra)
            if "layer" in extra and "id" in extra:
                payload["prim"] = f"{extra['layer']}/{extra['id']}"
        return json.dumps(payload)


def _default_json_logger(name="lanemap_query", level="INFO"):
    logger = logging.getLogger(name)
    if not logger.handlers:
        h = logging.StreamHandler(sys.stdout)
        h.setFormatter(_QueryJsonFormatter())
        logger.addHandler(h)
        logger.setLevel(level)
    return logger


class QueryLogging(NoopHooks):
    """
    Structured JSON logs for reference queries.
    Per-primitive events are DEBUG only and sampled every ``sample_every`` events.
    """

    def __init__(
        self,
        run_id: str = "local",
        level: str = "INFO",
        debug: bool = False,
        sample_every: int = 1,
        logger: logging.Logger | None = None,
    ):
        self.run_id, self.debug, self.sample_every = run_id, debug, max(1, sample_every)
        self.log = logger or _default_json_logger(level=level)
        self._seen = 0

    # --------------- Helpers -----------------------------

    def _emit(self, level: str, msg: str, **extra):
        payload = {"run_id": self.run_id}
        self.log.log(getattr(logging, level), msg, extra={"extra": {**payload, **extra}})

    def _sampled(self) -> bool:
        self._seen += 1
        return self.debug and (self._seen % self.sample_every) == 0

    @staticmethod
    def _kind(prim) -> str:
        return type(prim).__name__

    # --------------------------------------------------------

    def query_start(self, prim, *, layer, direction):
        self._seen = 0
        self._emit(
            "INFO",
            "query_start",
            kind=self._kind(prim),
            layer=layer,
            id=prim.id,
            direction=direction,
        )

    def query_end(self, prim, *, counts, wall_ms):
        self._emit("INFO", "query_end", id=prim.id, counts=counts, wall_ms=round(wall_ms, 3))

    def record(self, prim, *, layer):
        if self._sampled():
            self._emit("DEBUG", "record", kind=self._kind(prim), layer=layer, id=prim.id)

    def discard(self, prim, *, layer, reason):
        if self._sampled():
            self._emit("DEBUG", "discard", layer=layer, id=prim.id, reason=reason)

    def cycle(self, prim, *, layer, direction):
        # e.g. a rule naming the lane that carries it, walked DOWN
        if self.debug:
            self._emit("DEBUG", "cycle_skipped", layer=layer, id=prim.id, direction=direction)

    def error(self, prim, *, exc: BaseException, **extra):
        self._emit("ERROR", "query_error", kind=self._kind(prim), error=str(exc), **extra)

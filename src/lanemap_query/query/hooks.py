# query/hooks.py
from typing import Protocol


class QueryHooks(Protocol):
    def query_start(self, prim, *, layer, direction): ...
    def record(self, prim, *, layer): ...
    def discard(self, prim, *, layer, reason): ...
    def cycle(self, prim, *, layer, direction): ...
    def query_end(self, prim, *, counts, wall_ms): ...
    def error(self, prim, *, exc: BaseException, **kw): ...


class NoopHooks:
    def query_start(self, *_, **__):
        pass

    def record(self, *_, **__):
        pass

    def discard(self, *_, **__):
        pass

    def cycle(self, *_, **__):
        pass

    def query_end(self, *_, **__):
        pass

    def error(self, *_, **__):
        pass

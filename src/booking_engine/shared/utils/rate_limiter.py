import time
from collections.abc import Callable
from dataclasses import dataclass

from booking_engine.shared.domain.exception import TooManyRequestsException


@dataclass
class _Window:
    started_at: float
    count: int


class RateLimiter:
    """クライアント識別子ごとの固定ウィンドウ・レートリミッタ

    状態はプロセス内のみで保持する（Lambda のウォームコンテナ間でのみ共有）。
    """

    PRUNE_THRESHOLD = 10_000

    def __init__(
        self,
        max_requests: int,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, _Window] = {}

    def hit(self, key: str) -> bool:
        """リクエストを1件記録し、許可されるかを返す"""
        now = self._clock()
        window = self._windows.get(key)

        if window is None or now - window.started_at > self.window_seconds:
            if len(self._windows) >= self.PRUNE_THRESHOLD:
                self._prune(now)
            self._windows[key] = _Window(started_at=now, count=1)
            return True

        window.count += 1
        return window.count <= self.max_requests

    def check(self, key: str) -> None:
        """上限超過時に TooManyRequestsException を送出する"""
        if not self.hit(key):
            raise TooManyRequestsException()

    def _prune(self, now: float) -> None:
        expired = [
            key
            for key, window in self._windows.items()
            if now - window.started_at > self.window_seconds
        ]
        for key in expired:
            del self._windows[key]

"""
파일 시스템 감시 기반 핫 리로드

watchdog Observer로 설정 파일이 있는 디렉토리를 감시하고,
감시 파일의 내용이 실제로 바뀌었을 때만 ConfigStore 문서를 교체하고
등록된 핸들러를 호출합니다.

이벤트 처리 순서:
    필터 → 디바운스 대기 → 대기 중 쌓인 이벤트 병합 → 재디코딩
    → 정규 인코딩 비교 → 교체 → 핸들러 호출

디바운스는 고정 지연입니다. 대기 중 들어온 이벤트가 타이머를 다시 시작하지 않으며,
대기가 끝나면 큐에 쌓인 이벤트를 비우고 한 번만 리로드합니다.

사용법:
    ```python
    store = ConfigStore.load("config/app.yaml")
    watcher = ConfigWatcher(store)
    watcher.start()

    # 앱 종료 시
    await watcher.stop()
    ```
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable

from watchdog.events import (
    EVENT_TYPE_CLOSED,
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from lib.errors import ConfigError, ErrorClassifier, HandlerError, SubscriptionError
from lib.path_utils import WatchTarget

from .store import ChangeHandler, ConfigStore

DEFAULT_DEBOUNCE_SECONDS = 1.0
DEFAULT_HEALTH_CHECK_SECONDS = 5.0

# 읽기만 하는 opened/closed_no_write 이벤트는 제외 (리로드 자체가 파일을 열기 때문)
RELOAD_EVENT_TYPES = frozenset(
    {
        EVENT_TYPE_CREATED,
        EVENT_TYPE_MODIFIED,
        EVENT_TYPE_MOVED,
        EVENT_TYPE_DELETED,
        EVENT_TYPE_CLOSED,
    }
)


@dataclass
class WatchStats:
    """감시 세션 카운터"""

    events_seen: int = 0
    events_ignored: int = 0
    cycles: int = 0  # 디바운스 후 리로드를 시도한 횟수
    reloads: int = 0  # 실제 교체 + 알림까지 진행한 횟수
    failures: int = 0
    handler_errors: int = 0
    subscription_errors: int = 0
    observer_restarts: int = 0


class _EventBridge(FileSystemEventHandler):
    """Observer 스레드 → 이벤트 루프 전달"""

    def __init__(self, watcher: "ConfigWatcher"):
        super().__init__()
        self.watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        self.watcher._submit(event)


class ConfigWatcher:
    """설정 파일 핫 리로드 감시자

    감시 세션마다 백그라운드 태스크 하나가 이벤트를 순차 처리합니다.
    문서 교체와 핸들러 호출은 이 태스크에서만 일어납니다.
    """

    def __init__(
        self,
        store: ConfigStore,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        health_check_seconds: float = DEFAULT_HEALTH_CHECK_SECONDS,
        observer_factory: Callable[[], Any] = Observer,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ):
        """
        Args:
            store: 갱신할 ConfigStore (소유하지 않음)
            debounce_seconds: 이벤트 수신 후 리로드까지 대기 시간 (초)
            health_check_seconds: Observer 생존 확인 주기 (초)
            observer_factory: watchdog Observer 생성 함수
            logger: 주입 로거 (None이면 모듈 로거)
        """
        self.store = store
        self.debounce_seconds = debounce_seconds
        self.health_check_seconds = health_check_seconds
        self.observer_factory = observer_factory
        self.logger = logger or logging.getLogger(__name__)
        self.target = WatchTarget.from_path(store.path)
        self.stats = WatchStats()

        self._observer = None
        self._handler = _EventBridge(self)
        self._queue: asyncio.Queue | None = None
        self._task: asyncio.Task | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._cycle_lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """파일 감시 시작

        실행 중인 이벤트 루프 안에서 호출해야 합니다.

        Raises:
            SubscriptionError: 디렉토리 감시 등록 실패
        """
        if self.running:
            self.logger.warning(
                f"[ConfigWatcher] 이미 감시 중: path={self.store.path}"
            )
            return

        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        self._observer = self._start_observer()

        self.logger.info(
            f"[ConfigWatcher] 설정 감시 시작: path={self.store.path}, "
            f"directory={self.target.directory}"
        )
        self._task = self._loop.create_task(self._run())

    async def stop(self) -> None:
        """파일 감시 중지"""
        observer, self._observer = self._observer, None
        if observer is not None:
            observer.stop()
            await asyncio.to_thread(observer.join)

        self._queue = None
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

            self.logger.info(f"[ConfigWatcher] 설정 감시 중지: path={self.store.path}")

    def report_subscription_error(self, error: BaseException) -> None:
        """감시 백엔드 오류 전달 (어느 스레드에서든 호출 가능)"""
        self._submit(error)

    async def reload_now(self) -> bool:
        """디바운스 없이 즉시 리로드

        Returns:
            bool: 문서가 교체되어 핸들러가 호출되었으면 True
        """
        async with self._cycle_lock:
            return await self._reload()

    async def _reload(self) -> bool:
        self.stats.cycles += 1

        old_data = self.store.encode()

        try:
            document = await asyncio.to_thread(self.store.read_document)
        except ConfigError as e:
            self.stats.failures += 1
            self.logger.error(
                f"[ConfigWatcher] 새 설정 읽기 실패: path={self.store.path}, "
                f"error={ErrorClassifier.format_message(e)}"
            )
            return False
        except Exception as e:
            self.stats.failures += 1
            self.logger.error(
                f"[ConfigWatcher] 새 설정 읽기 실패: path={self.store.path}, "
                f"error={ErrorClassifier.format_message(e, include_traceback=True)}"
            )
            return False

        try:
            new_data = self.store.encode(document)
        except Exception as e:
            self.stats.failures += 1
            self.logger.error(
                f"[ConfigWatcher] 새 설정 인코딩 실패: path={self.store.path}, "
                f"error={ErrorClassifier.format_message(e, include_traceback=True)}"
            )
            return False

        if old_data == new_data:
            self.logger.debug(f"[ConfigWatcher] 내용 변경 없음: path={self.store.path}")
            return False

        self.store._swap(document)
        self.stats.reloads += 1
        self.logger.info(
            f"[ConfigWatcher] 설정 파일 변경, 리로드: path={self.store.path}, "
            f"version={self.store.version}"
        )

        await self._notify()
        return True

    def _start_observer(self) -> Any:
        observer = self.observer_factory()
        try:
            observer.schedule(self._handler, self.target.directory, recursive=False)
            observer.start()
        except OSError as e:
            raise SubscriptionError(
                f"디렉토리 감시 등록 실패: {e}", path=self.target.directory
            ) from e
        return observer

    def _submit(self, item: FileSystemEvent | BaseException) -> None:
        # Observer 스레드에서 호출됨
        loop, queue = self._loop, self._queue
        if loop is None or queue is None or loop.is_closed():
            return
        try:
            loop.call_soon_threadsafe(queue.put_nowait, item)
        except RuntimeError:
            # 종료 중인 루프
            self.logger.debug(f"[ConfigWatcher] 루프 종료 후 이벤트 무시: {item}")

    async def _run(self) -> None:
        while True:
            try:
                item = await asyncio.wait_for(
                    self._queue.get(), timeout=self.health_check_seconds
                )
            except asyncio.TimeoutError:
                self._check_observer()
                continue

            if not self._accept(item):
                continue

            # 고정 지연: 대기 중 들어온 이벤트는 타이머를 다시 시작하지 않음
            await asyncio.sleep(self.debounce_seconds)
            self._drain()

            try:
                await self.reload_now()
            except Exception as e:
                # 사이클 하나가 실패해도 감시는 계속
                self.stats.failures += 1
                self.logger.error(
                    f"[ConfigWatcher] 리로드 사이클 실패: path={self.store.path}, "
                    f"error={ErrorClassifier.format_message(e, include_traceback=True)}"
                )

    def _accept(self, item: FileSystemEvent | BaseException) -> bool:
        if isinstance(item, BaseException):
            self._log_subscription_error(item)
            return False

        self.stats.events_seen += 1
        relevant = item.event_type in RELOAD_EVENT_TYPES
        if not relevant or not self.target.matches_event(item):
            self.stats.events_ignored += 1
            self.logger.debug(f"[ConfigWatcher] 무관한 이벤트 무시: {item.src_path}")
            return False
        return True

    def _drain(self) -> None:
        """디바운스 중 쌓인 이벤트 병합"""
        while True:
            try:
                item = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            # 필터와 통계는 첫 이벤트와 동일하게 적용
            self._accept(item)

    def _check_observer(self) -> None:
        """Observer 스레드 생존 확인, 죽었으면 재시작"""
        observer = self._observer
        if observer is None or observer.is_alive():
            return

        self._log_subscription_error(
            SubscriptionError("Observer 스레드 종료됨", path=self.target.directory)
        )
        observer.stop()
        try:
            self._observer = self._start_observer()
        except SubscriptionError as e:
            # 다음 확인 주기에 재시도
            self._log_subscription_error(e)
            return

        self.stats.observer_restarts += 1
        self.logger.info(
            f"[ConfigWatcher] Observer 재시작: directory={self.target.directory}"
        )

    def _log_subscription_error(self, error: BaseException) -> None:
        self.stats.subscription_errors += 1
        self.logger.error(
            f"[ConfigWatcher] 파일 감시 오류: path={self.store.path}, "
            f"error={ErrorClassifier.format_message(error)}"
        )

    async def _notify(self) -> None:
        """핸들러 호출 (등록 순서, 핸들러별 실패 격리)"""
        # 스냅샷: 호출 중 등록된 핸들러는 다음 사이클부터
        for handler in self.store.handlers:
            try:
                result = handler(self.store)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                self._log_handler_error(handler, e)

    def _log_handler_error(self, handler: ChangeHandler, error: Exception) -> None:
        name = getattr(handler, "__qualname__", repr(handler))
        wrapped = HandlerError(
            f"핸들러 실행 실패: {name}", handler_name=name, path=str(self.store.path)
        )
        wrapped.__cause__ = error

        self.stats.handler_errors += 1
        self.logger.error(
            f"[ConfigWatcher] {ErrorClassifier.format_message(wrapped)}",
            exc_info=error,
        )

"""
变更协调器

同一时间只允许一个提交在进行中；提交前先做校验，校验失败不会接触存储。
成功后依次调用 on_refresh 和 on_close，失败时返回 "Failed to <action>: <message>"。
校验类错误（包括存储层抛出的 ValidationException）返回 invalid，不记为异常。
"""
import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Type

from pydantic import BaseModel, ValidationError

from taskboard.core.exceptions import ValidationException, error_message
from taskboard.core.logging import get_logger
from taskboard.schemas.base import first_error_message

logger = get_logger(__name__)

Callback = Callable[[], Any]


class MutationOutcome(str, Enum):
    COMMITTED = "committed"
    FAILED = "failed"
    REJECTED = "rejected"
    INVALID = "invalid"


@dataclass
class MutationResult:
    outcome: MutationOutcome
    value: Any = None
    message: Optional[str] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.outcome == MutationOutcome.COMMITTED


async def _invoke(callback: Optional[Callback]) -> None:
    if callback is None:
        return
    result = callback()
    if inspect.isawaitable(result):
        await result


class MutationCoordinator:
    """单个表单的提交协调器"""

    def __init__(self, action: str, on_refresh: Optional[Callback] = None, on_close: Optional[Callback] = None):
        self.action = action
        self.on_refresh = on_refresh
        self.on_close = on_close
        self._submitting = False
        self._alive = True

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    @property
    def is_alive(self) -> bool:
        return self._alive

    def dispose(self) -> None:
        """标记为已失效，进行中的请求完成后不再执行回调"""
        self._alive = False

    async def submit(
        self,
        payload: Any,
        operation: Callable[[Any], Awaitable[Any]],
        schema: Optional[Type[BaseModel]] = None,
        on_refresh: Optional[Callback] = None,
        on_close: Optional[Callback] = None,
        precheck: Optional[Callable[[Any], Awaitable[None]]] = None,
    ) -> MutationResult:
        rejected = self._rejection()
        if rejected is not None:
            return rejected

        validated = payload
        if schema is not None and not isinstance(payload, schema):
            try:
                validated = schema.model_validate(payload)
            except ValidationError as exc:
                return self._invalid(first_error_message(exc), exc)

        # 依赖现有数据的校验，在占用表单之前完成
        if precheck is not None:
            try:
                await precheck(validated)
            except ValidationException as exc:
                return self._invalid(exc.message, exc)
            rejected = self._rejection()
            if rejected is not None:
                return rejected

        self._submitting = True
        try:
            try:
                value = await operation(validated)
            except ValidationException as exc:
                return self._invalid(exc.message, exc)
            except Exception as exc:
                message = f"Failed to {self.action}: {error_message(exc)}"
                logger.exception(message)
                return MutationResult(MutationOutcome.FAILED, message=message, error=exc)

            if self._alive:
                await self._run_callbacks(on_refresh or self.on_refresh, on_close or self.on_close)
            return MutationResult(MutationOutcome.COMMITTED, value=value)
        finally:
            self._submitting = False

    def _rejection(self) -> Optional[MutationResult]:
        if not self._alive:
            return MutationResult(MutationOutcome.REJECTED, message=f"Cannot {self.action}: form is closed")
        if self._submitting:
            logger.debug(f"Rejected re-entrant submission: {self.action}")
            return MutationResult(MutationOutcome.REJECTED, message=f"Already trying to {self.action}")
        return None

    def _invalid(self, message: str, exc: Exception) -> MutationResult:
        logger.info(f"Validation failed for {self.action}: {message}")
        return MutationResult(MutationOutcome.INVALID, message=message, error=exc)

    async def _run_callbacks(self, on_refresh: Optional[Callback], on_close: Optional[Callback]) -> None:
        # 先刷新再关闭
        for callback in (on_refresh, on_close):
            try:
                await _invoke(callback)
            except Exception:
                logger.exception(f"Callback failed after {self.action}")

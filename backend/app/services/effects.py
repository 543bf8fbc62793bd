"""
副作用分发器 (Side-Effect Dispatcher)

主流程在执行过程中登记次要副作用（审计记录、通知邮件），在主结果产生之后统一执行。
每个副作用相互隔离：任何一个失败只写运维日志，不会传播给调用者，也不会影响其他副作用。

The primary flow registers secondary effects (audit entries, notification mails)
while it runs; they execute together after the primary result is produced. Each
effect is isolated: a failure is only logged for operators and never reaches the
caller or the other effects.
"""
import logging
from functools import partial
from typing import Awaitable, Callable, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from app.services.audit import record_audit
from app.services.notification import Mailer

logger = logging.getLogger(__name__)

Effect = Callable[[], Awaitable[object]]


class SideEffects:
    """收集并执行尽力而为的副作用 (Collects and runs best-effort effects)"""

    def __init__(self, session_factory: async_sessionmaker, mailer: Optional[Mailer] = None):
        self._session_factory = session_factory
        self._mailer = mailer
        self._pending: list[tuple[str, Effect]] = []

    @property
    def pending(self) -> int:
        return len(self._pending)

    def audit(self, user_id: Optional[int], action: str, detail: Optional[str] = None) -> None:
        """登记一条审计记录 (Register an audit entry)"""
        self._pending.append(
            (f"audit:{action}", partial(record_audit, self._session_factory, user_id, action, detail))
        )

    def mail(self, to: str, subject: str, html: str) -> None:
        """登记一封邮件 (Register a mail)"""
        if self._mailer is None:
            logger.warning("No mailer configured, dropping mail '%s' to %s", subject, to)
            return
        self._pending.append((f"mail:{subject}", partial(self._mailer.send_mail, to, subject, html)))

    async def dispatch(self) -> int:
        """
        执行所有已登记的副作用，返回成功数量 (Run all registered effects, return success count)

        执行后清空队列，重复调用不会重复执行。
        The queue is drained, so a second call does not repeat effects.
        """
        pending, self._pending = self._pending, []
        succeeded = 0
        for name, effect in pending:
            try:
                await effect()
                succeeded += 1
            except Exception:
                logger.exception("Side effect %s failed", name)
        return succeeded

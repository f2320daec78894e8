from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Coroutine, Optional


@dataclass
class TaskSlot:
    """Holds at most one running asyncio task.

    Starting a new task through replace() cancels whatever the slot held
    before, so re-arming a timer is a single call.
    """

    name: str

    _task: Optional[asyncio.Task] = field(default=None, init=False, repr=False)

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._task

    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def replace(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(coro, name=self.name)
        return self._task

    def cancel(self) -> None:
        task = self._task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def aclose(self) -> None:
        task = self._task
        self._task = None
        if task is None or task is asyncio.current_task():
            return

        if not task.done():
            task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

"""
协作式调度器

单线程、按 tick 推进的逻辑时钟:
- 任务是生成器，yield 一个等待秒数 (None 或 0 表示下一个 tick 继续)
- spawn() 立即执行任务直到第一次 yield
- tick(dt) 推进时钟，每个到期任务最多恢复一次
- 没有抢占和取消，任务在每次恢复时自行检查逻辑状态
"""
from typing import Callable, Generator, List, Optional

TaskGen = Generator[Optional[float], None, None]

# 浮点累积误差容忍度
EPSILON = 1e-9


class Task:
    """调度任务"""

    def __init__(self, name: str, gen: TaskGen):
        self.name = name
        self.gen = gen
        self.wake_at = 0.0
        self.done = False

    def __repr__(self) -> str:
        status = "done" if self.done else f"wake_at={self.wake_at:.3f}"
        return f"Task({self.name}, {status})"


class Scheduler:
    """
    协作式调度器

    Attributes:
        now: 当前逻辑时间 (秒)
    """

    def __init__(self, start: float = 0.0):
        self.now = start
        self._tasks: List[Task] = []

    def spawn(self, gen: TaskGen, name: str = "task") -> Task:
        """
        启动任务 (同步执行到第一次 yield)

        Args:
            gen: 任务生成器
            name: 任务名 (调试用)

        Returns:
            任务句柄
        """
        task = Task(name, gen)
        self._tasks.append(task)
        self._step(task)
        return task

    def _step(self, task: Task):
        try:
            delay = next(task.gen)
        except StopIteration:
            task.done = True
            return
        task.wake_at = self.now + (delay or 0.0)

    def tick(self, dt: float):
        """
        推进时钟并恢复到期任务

        Args:
            dt: 推进的秒数
        """
        if dt < 0:
            raise ValueError(f"dt must be non-negative, got {dt}")

        self.now += dt

        # 本 tick 内新启动的任务不在快照中
        for task in list(self._tasks):
            if not task.done and task.wake_at <= self.now + EPSILON:
                self._step(task)

        self._tasks = [t for t in self._tasks if not t.done]

    def run_for(self, seconds: float, dt: float = 0.1):
        """以固定步长推进指定时长"""
        target = self.now + seconds
        while self.now + EPSILON < target:
            self.tick(min(dt, target - self.now))

    def run_until(
        self,
        predicate: Callable[[], bool],
        dt: float = 0.1,
        limit: float = 60.0,
    ) -> bool:
        """
        推进直到条件成立或超过时限

        Returns:
            条件是否成立
        """
        deadline = self.now + limit
        while not predicate():
            if self.now + EPSILON >= deadline:
                return False
            self.tick(dt)
        return True

    @property
    def pending(self) -> List[Task]:
        """未完成的任务"""
        return [t for t in self._tasks if not t.done]

    @property
    def idle(self) -> bool:
        return not self.pending

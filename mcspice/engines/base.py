#!filepath: mcspice/engines/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, Iterable, Iterator, Optional, TypeVar


InEvent = TypeVar("InEvent")
OutEvent = TypeVar("OutEvent")


class BaseEngine(ABC, Generic[InEvent, OutEvent]):
    """
    Engine 抽象基类（Atomic Engine Layer）：

    - 不做任何 I/O（不读文件 / 不启动进程）
    - 专注“输入事件 → 输出事件”的纯逻辑
    - process 返回 None 表示该事件不产出结果
    """

    @abstractmethod
    def process(self, event: InEvent) -> Optional[OutEvent]:
        """
        处理单个事件（最小粒度单位）。
        """
        raise NotImplementedError

    def process_stream(self, events: Iterable[InEvent]) -> Iterator[OutEvent]:
        """
        流式处理一批事件，默认逐个调用 process，丢弃 None。
        状态机类引擎的状态跨事件保留。
        """
        for ev in events:
            out = self.process(ev)
            if out is not None:
                yield out

"""
链式哈希

输出流外包一组有序的哈希累加器：写入的字节原样依次经过每一级，
每级只更新自己的哈希与字节计数，最后到达底层文件。
"""

import hashlib
from dataclasses import dataclass
from typing import BinaryIO, Dict, List, Sequence


@dataclass(frozen=True)
class DigestResult:
    """单级哈希结果"""
    algorithm: str
    hexdigest: str
    size: int


class DigestStage:
    """单级哈希累加器"""

    def __init__(self, algorithm: str):
        self.algorithm = algorithm.lower()
        if self.algorithm not in hashlib.algorithms_available:
            raise ValueError(f"不支持的哈希算法: {algorithm}")
        self._hasher = hashlib.new(self.algorithm)
        self.size = 0

    def update(self, data: bytes) -> None:
        self._hasher.update(data)
        self.size += len(data)

    def hexdigest(self) -> str:
        return self._hasher.hexdigest()

    def result(self) -> DigestResult:
        return DigestResult(self.algorithm, self.hexdigest(), self.size)


class DigestChain:
    """哈希链输出流

    ``stages`` 从最外层到最内层排列，写入的字节依次经过各级后写入 ``sink``。
    """

    def __init__(self, sink: BinaryIO, algorithms: Sequence[str]):
        self._sink = sink
        self.stages: List[DigestStage] = [DigestStage(a) for a in algorithms]
        self.closed = False

    def write(self, data: bytes) -> int:
        if self.closed:
            raise ValueError("写入已关闭的哈希链")
        data = bytes(data)
        for stage in self.stages:
            stage.update(data)
        self._sink.write(data)
        return len(data)

    def flush(self) -> None:
        self._sink.flush()

    def close(self) -> None:
        """刷新并关闭底层输出"""
        if self.closed:
            return
        self.closed = True
        self._sink.flush()
        self._sink.close()

    def finalize(self) -> List[DigestResult]:
        """按从外到内的顺序返回各级结果"""
        return [stage.result() for stage in self.stages]

    def hexdigests(self) -> Dict[str, str]:
        return {stage.algorithm: stage.hexdigest() for stage in self.stages}

    @property
    def size(self) -> int:
        """最外层累计的字节数"""
        return self.stages[0].size if self.stages else 0


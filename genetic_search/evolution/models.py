"""
染色體資料模型 (Chromosome Data Models)

定義演化搜尋引擎的核心資料結構，包含適應度排序、染色體與種群。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterator, List, Optional, Tuple
import math

import numpy as np


FitnessValue = int


class FitnessOrdering(Enum):
    """適應度排序方向

    Attributes:
        MAXIMIZE: 分數越高越好
        MINIMIZE: 分數越低越好
    """
    MAXIMIZE = "maximize"
    MINIMIZE = "minimize"


def fitness_sort_key(
    ordering: FitnessOrdering,
) -> Callable[["Chromosome"], Tuple[int, FitnessValue]]:
    """建立最佳優先的排序鍵

    無分數 (None) 永遠排在所有有分數的染色體之後，與排序方向無關。
    Python 的 sorted 為穩定排序，同分者保持原順序。

    Args:
        ordering: 適應度排序方向

    Returns:
        可傳給 sorted / list.sort 的 key 函數
    """
    if ordering == FitnessOrdering.MAXIMIZE:
        def key(chromosome: "Chromosome") -> Tuple[int, FitnessValue]:
            score = chromosome.fitness_score
            return (1, 0) if score is None else (0, -score)
    else:
        def key(chromosome: "Chromosome") -> Tuple[int, FitnessValue]:
            score = chromosome.fitness_score
            return (1, 0) if score is None else (0, score)
    return key


def is_better_fitness(
    candidate: Optional[FitnessValue],
    incumbent: Optional[FitnessValue],
    ordering: FitnessOrdering,
) -> bool:
    """判斷 candidate 是否嚴格優於 incumbent

    None 永遠是最差的分數：None 不會優於任何分數，任何分數都優於 None。
    """
    if candidate is None:
        return False
    if incumbent is None:
        return True
    if ordering == FitnessOrdering.MAXIMIZE:
        return candidate > incumbent
    return candidate < incumbent


def meets_target(
    score: Optional[FitnessValue],
    target: FitnessValue,
    ordering: FitnessOrdering,
) -> bool:
    """分數是否達到目標 (最大化時 >=，最小化時 <=)"""
    if score is None:
        return False
    if ordering == FitnessOrdering.MAXIMIZE:
        return score >= target
    return score <= target


def to_fitness_value(value: float, precision: float = 1.0) -> Optional[FitnessValue]:
    """將浮點分數轉換為整數刻度的適應度

    Args:
        value: 原始浮點分數
        precision: 刻度精度，例如 1e-5 表示保留五位小數

    Returns:
        整數適應度；非有限數值回傳 None (視為無效)
    """
    if not math.isfinite(value):
        return None
    return int(round(value / precision))


@dataclass(eq=False)
class Chromosome:
    """染色體 (候選解)

    Attributes:
        genes: 基因容器，型別由基因型決定 (list、bit-packed int 或矩陣列視圖)
        fitness_score: 快取的適應度分數，None 表示尚未評估或無效
        age: 未經重新突變而存活的世代數
        row_id: 矩陣基因型中所佔的列編號，其他基因型為 None

    以物件身分比較 (eq=False)：兩條基因相同的染色體仍是不同的個體。
    """
    genes: Any
    fitness_score: Optional[FitnessValue] = None
    age: int = 0
    row_id: Optional[int] = None

    def taint(self) -> None:
        """基因已改變：清除快取分數並重置年齡"""
        self.fitness_score = None
        self.age = 0

    @property
    def is_scored(self) -> bool:
        return self.fitness_score is not None


@dataclass
class Population:
    """種群

    有序的染色體序列。排序只在選擇之後短暫具有意義 (代表適應度名次)。

    Attributes:
        chromosomes: 染色體列表
    """
    chromosomes: List[Chromosome] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.chromosomes)

    def __iter__(self) -> Iterator[Chromosome]:
        return iter(self.chromosomes)

    def __getitem__(self, index: int) -> Chromosome:
        return self.chromosomes[index]

    @property
    def size(self) -> int:
        return len(self.chromosomes)

    def extend(self, chromosomes: List[Chromosome]) -> None:
        self.chromosomes.extend(chromosomes)

    def truncate(self, size: int) -> List[Chromosome]:
        """保留前 size 個染色體

        Args:
            size: 保留數量；大於目前長度時不做任何事

        Returns:
            被移除的染色體 (呼叫端負責交回基因型釋放)
        """
        if size >= len(self.chromosomes):
            return []
        dropped = self.chromosomes[size:]
        del self.chromosomes[size:]
        return dropped

    def sort_by_fitness(self, ordering: FitnessOrdering) -> None:
        """依適應度做最佳優先的穩定排序"""
        self.chromosomes.sort(key=fitness_sort_key(ordering))

    def best_chromosome(self, ordering: FitnessOrdering) -> Optional[Chromosome]:
        """取得最佳且有分數的染色體，全部無分數時回傳 None"""
        scored = [c for c in self.chromosomes if c.fitness_score is not None]
        if not scored:
            return None
        return min(scored, key=fitness_sort_key(ordering))

    def worst_chromosome(self, ordering: FitnessOrdering) -> Optional[Chromosome]:
        """取得最差且有分數的染色體，全部無分數時回傳 None"""
        scored = [c for c in self.chromosomes if c.fitness_score is not None]
        if not scored:
            return None
        return max(scored, key=fitness_sort_key(ordering))

    def unscored(self) -> List[Chromosome]:
        return [c for c in self.chromosomes if c.fitness_score is None]

    def invalid_count(self) -> int:
        return sum(1 for c in self.chromosomes if c.fitness_score is None)

    def fitness_score_cardinality(self) -> int:
        """不同適應度分數的數量

        所有無分數的染色體合計為一個額外類別。
        """
        scores = {c.fitness_score for c in self.chromosomes if c.fitness_score is not None}
        has_absent = any(c.fitness_score is None for c in self.chromosomes)
        return len(scores) + (1 if has_absent else 0)

    def fitness_score_stddev(self) -> float:
        """有分數染色體的適應度標準差 (母體標準差)

        Returns:
            標準差；有分數的染色體少於兩個時為 0.0
        """
        scores = [c.fitness_score for c in self.chromosomes if c.fitness_score is not None]
        if len(scores) < 2:
            return 0.0
        return float(np.std(np.asarray(scores, dtype=np.float64)))

    def increment_age(self) -> None:
        for chromosome in self.chromosomes:
            chromosome.age += 1

"""
基因邊界模型 (Gene Bounds Model)

定義數值型基因的範圍與類型約束，供範圍基因型與矩陣基因型使用。
"""

from dataclasses import dataclass
from enum import Enum
import math
import random
from typing import Optional, Tuple, Union


class GeneType(Enum):
    """基因類型

    Attributes:
        FLOAT: 連續變量（浮點數）
        INTEGER: 離散變量（整數）
    """
    FLOAT = "float"
    INTEGER = "integer"


@dataclass(frozen=True)
class GeneBounds:
    """基因邊界定義

    定義單一基因的數值範圍與類型約束，邊界為閉區間 [min_value, max_value]。

    Attributes:
        min_value: 最小值
        max_value: 最大值
        gene_type: 基因類型（FLOAT 或 INTEGER）
    """
    min_value: float
    max_value: float
    gene_type: GeneType = GeneType.FLOAT

    @property
    def width(self) -> float:
        return self.max_value - self.min_value

    def integer_limits(self) -> Tuple[int, int]:
        """邊界內的最小與最大整數 (兩端向內取整)"""
        return math.ceil(self.min_value), math.floor(self.max_value)

    def is_empty(self) -> bool:
        """邊界是否不包含任何值"""
        if self.min_value > self.max_value:
            return True
        if self.gene_type == GeneType.INTEGER:
            low, high = self.integer_limits()
            return low > high
        return False

    def validate(self, value: float) -> bool:
        """驗證數值是否在邊界內

        Args:
            value: 要驗證的數值

        Returns:
            數值是否在 [min_value, max_value] 範圍內，INTEGER 類型另需為整數
        """
        if not self.min_value <= value <= self.max_value:
            return False
        if self.gene_type == GeneType.INTEGER:
            return float(value).is_integer()
        return True

    def clamp(self, value: float) -> float:
        """將數值限制在邊界內

        Args:
            value: 要限制的數值

        Returns:
            限制後的數值，若為 INTEGER 類型則四捨五入為 int 後再限制於
            邊界內的整數範圍
        """
        if self.gene_type == GeneType.INTEGER:
            low, high = self.integer_limits()
            return max(low, min(high, int(round(value))))
        return max(self.min_value, min(self.max_value, value))

    def sample(self, rng: random.Random) -> float:
        """在邊界內均勻取樣"""
        if self.gene_type == GeneType.INTEGER:
            return rng.randint(*self.integer_limits())
        return rng.uniform(self.min_value, self.max_value)

    def shift(
        self,
        value: float,
        distance_range: Tuple[float, float],
        rng: random.Random,
    ) -> float:
        """在 distance_range 內取樣位移量並以隨機正負號位移，結果限制在邊界內"""
        low, high = distance_range
        if self.gene_type == GeneType.INTEGER:
            distance = rng.randint(int(low), int(high))
        else:
            distance = rng.uniform(low, high)
        if rng.random() < 0.5:
            distance = -distance
        return self.clamp(value + distance)


def parse_bounds(
    allele_range: Union[GeneBounds, Tuple[float, float]],
    gene_type: Optional[GeneType] = None,
) -> GeneBounds:
    """將 (min, max) 元組或 GeneBounds 正規化為 GeneBounds

    元組的兩端皆為 int 且未指定 gene_type 時視為 INTEGER。
    """
    if isinstance(allele_range, GeneBounds):
        return allele_range
    min_value, max_value = allele_range
    if gene_type is None:
        both_int = isinstance(min_value, int) and isinstance(max_value, int)
        gene_type = GeneType.INTEGER if both_int else GeneType.FLOAT
    return GeneBounds(min_value, max_value, gene_type)

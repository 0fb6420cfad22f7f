"""
突變算子 (Mutation Operators)

負責對交叉後的種群引入隨機擾動。每條染色體獨立地以
mutation_probability 的機率突變，實際的基因變動交由基因型執行。
"""

import random
from typing import TYPE_CHECKING

from .exceptions import InvalidParameterError, validate_probability
from .models import Population

if TYPE_CHECKING:
    from genetic_search.genotype.base import Genotype
    from .engine import EvolveConfig


class Mutate:
    """突變算子基底類別

    Attributes:
        mutation_probability: 每條染色體的突變機率 [0, 1]
        number_of_mutations: 每次突變變動的基因數
        only_offspring: 是否跳過年齡大於 0 的染色體 (保留的精英)
    """

    def __init__(
        self,
        mutation_probability: float,
        number_of_mutations: int = 1,
        only_offspring: bool = True,
    ):
        """初始化突變算子

        Args:
            mutation_probability: 每條染色體的突變機率
            number_of_mutations: 每次突變變動的基因數，預設為 1
            only_offspring: 是否只突變子代，預設為 True

        Raises:
            InvalidRateError: 若 mutation_probability 不在 [0, 1] 範圍內
            InvalidParameterError: 若 number_of_mutations < 1
        """
        validate_probability("mutation_probability", mutation_probability)
        if number_of_mutations < 1:
            raise InvalidParameterError(
                "number_of_mutations", number_of_mutations, "must be at least 1"
            )
        self.mutation_probability = mutation_probability
        self.number_of_mutations = number_of_mutations
        self.only_offspring = only_offspring

    def call(
        self,
        population: Population,
        genotype: "Genotype",
        config: "EvolveConfig",
        rng: random.Random,
    ) -> int:
        """就地突變種群

        每條染色體都會消耗一次機率取樣 (包含被跳過的精英)，
        使突變決策與種群中的位置一一對應。

        Args:
            population: 交叉後的種群
            genotype: 基因型
            config: 演化配置
            rng: 隨機來源

        Returns:
            被突變的染色體數量
        """
        mutated = 0
        for chromosome in population:
            if rng.random() >= self.mutation_probability:
                continue
            if self.only_offspring and chromosome.age > 0:
                continue
            genotype.mutate_chromosome(chromosome, self.number_of_mutations, rng)
            mutated += 1
        return mutated

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(mutation_probability={self.mutation_probability}, "
            f"number_of_mutations={self.number_of_mutations}, "
            f"only_offspring={self.only_offspring})"
        )


class MutateSingleGene(Mutate):
    """單基因突變：每次突變只變動一個基因位置"""

    def __init__(self, mutation_probability: float, only_offspring: bool = True):
        super().__init__(mutation_probability, 1, only_offspring)


class MutateMultiGene(Mutate):
    """多基因突變：每次突變變動 number_of_mutations 個互不重複的基因位置"""

    def __init__(
        self,
        mutation_probability: float,
        number_of_mutations: int,
        only_offspring: bool = True,
    ):
        super().__init__(mutation_probability, number_of_mutations, only_offspring)

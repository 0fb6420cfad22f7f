"""
交叉算子 (Crossover Operators)

負責由繁殖池產生子代，將種群恢復到目標大小。

每個子代來自一對親代 (father, mother)：先複製 father，再依交叉方式
取用 mother 的基因。繁殖池最前面的 elitism_size 個親代原封不動地保留，
其餘親代在繁殖後離開種群。
"""

from itertools import combinations
import random
from typing import TYPE_CHECKING, List, Tuple

from .exceptions import (
    IncompatibleOperatorError,
    InsufficientBreedingPoolError,
    InvalidParameterError,
    validate_non_negative,
)
from .models import Chromosome, Population

if TYPE_CHECKING:
    from genetic_search.genotype.base import Genotype
    from .engine import EvolveConfig


class Crossover:
    """交叉算子基底類別

    Attributes:
        elitism_size: 原封不動保留的最佳親代數量
        allow_duplicates: 同一世代內是否允許重複使用同一對親代
    """

    requires_crossover_indexes = False
    requires_crossover_points = False

    def __init__(self, elitism_size: int = 0, allow_duplicates: bool = True):
        validate_non_negative("elitism_size", elitism_size)
        self.elitism_size = elitism_size
        self.allow_duplicates = allow_duplicates

    def offspring_needed(self, pool_size: int, target_population_size: int) -> int:
        return target_population_size - min(self.elitism_size, pool_size)

    def validate(
        self,
        genotype: "Genotype",
        pool_size: int,
        target_population_size: int,
    ) -> None:
        """建構時檢查繁殖池與基因型是否足以支援此交叉

        Args:
            genotype: 基因型
            pool_size: 選擇後的繁殖池大小
            target_population_size: 目標種群大小

        Raises:
            IncompatibleOperatorError: 若基因型缺少所需的交叉位置或交叉點
            InvalidParameterError: 若 elitism_size 超過繁殖池或不小於目標種群大小
            InsufficientBreedingPoolError: 若繁殖池不足以產生所需子代
        """
        name = type(self).__name__
        if self.requires_crossover_indexes and not genotype.has_crossover_indexes:
            raise IncompatibleOperatorError(name, type(genotype).__name__, "crossover indexes")
        if self.requires_crossover_points and not genotype.has_crossover_points:
            raise IncompatibleOperatorError(name, type(genotype).__name__, "crossover points")
        if self.elitism_size > pool_size or self.elitism_size >= target_population_size:
            raise InvalidParameterError(
                "elitism_size",
                self.elitism_size,
                f"must not exceed the breeding pool ({pool_size}) "
                f"and must be below target_population_size ({target_population_size})",
            )

        needed = self.offspring_needed(pool_size, target_population_size)
        available_pairs = pool_size * (pool_size - 1) // 2
        if pool_size < 2 or (not self.allow_duplicates and available_pairs < needed):
            raise InsufficientBreedingPoolError(pool_size, needed, available_pairs)

    def parent_pairs(
        self,
        pool_size: int,
        count: int,
        rng: random.Random,
    ) -> List[Tuple[int, int]]:
        """抽出 count 對 (father, mother) 繁殖池索引"""
        if self.allow_duplicates:
            return [tuple(rng.sample(range(pool_size), 2)) for _ in range(count)]
        all_pairs = list(combinations(range(pool_size), 2))
        if count > len(all_pairs):
            raise InsufficientBreedingPoolError(pool_size, count, len(all_pairs))
        return rng.sample(all_pairs, count)

    def call(
        self,
        population: Population,
        genotype: "Genotype",
        config: "EvolveConfig",
        rng: random.Random,
    ) -> None:
        """就地交叉：以精英加子代取代繁殖池

        Args:
            population: 最佳優先排序的繁殖池
            genotype: 基因型
            config: 演化配置
            rng: 隨機來源
        """
        parents = population.chromosomes
        elites = parents[:self.elitism_size]
        needed = config.target_population_size - len(elites)

        offspring = []
        for father_index, mother_index in self.parent_pairs(len(parents), needed, rng):
            child = genotype.clone_chromosome(parents[father_index])
            self.cross(genotype, child, parents[mother_index], rng)
            child.taint()
            offspring.append(child)

        for chromosome in parents[len(elites):]:
            genotype.release_chromosome(chromosome)
        population.chromosomes = elites + offspring

    def cross(
        self,
        genotype: "Genotype",
        child: Chromosome,
        mother: Chromosome,
        rng: random.Random,
    ) -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(elitism_size={self.elitism_size}, "
            f"allow_duplicates={self.allow_duplicates})"
        )


class CrossoverClone(Crossover):
    """複製交叉：子代為 father 的複本，適用於所有基因型"""

    def cross(self, genotype, child, mother, rng) -> None:
        pass


class CrossoverSingleGene(Crossover):
    """單基因交叉：子代在一個隨機位置取用 mother 的基因"""

    requires_crossover_indexes = True

    def cross(self, genotype, child, mother, rng) -> None:
        genotype.crossover_chromosome_genes(1, child, mother, rng)


class CrossoverMultiGene(Crossover):
    """多基因交叉：子代在 number_of_crossovers 個互不重複的位置取用 mother 的基因

    Attributes:
        number_of_crossovers: 交叉的基因數量 (上限為可交叉位置數)
    """

    requires_crossover_indexes = True

    def __init__(
        self,
        number_of_crossovers: int,
        elitism_size: int = 0,
        allow_duplicates: bool = True,
    ):
        super().__init__(elitism_size, allow_duplicates)
        if number_of_crossovers < 1:
            raise InvalidParameterError(
                "number_of_crossovers", number_of_crossovers, "must be at least 1"
            )
        self.number_of_crossovers = number_of_crossovers

    def cross(self, genotype, child, mother, rng) -> None:
        genotype.crossover_chromosome_genes(self.number_of_crossovers, child, mother, rng)


class CrossoverUniform(Crossover):
    """均勻交叉：每個可交叉位置各有 50% 機率取用 mother 的基因"""

    requires_crossover_indexes = True

    def cross(self, genotype, child, mother, rng) -> None:
        indexes = [index for index in genotype.crossover_indexes() if rng.random() < 0.5]
        genotype.crossover_chromosome_indexes(child, mother, indexes)


class CrossoverSinglePoint(Crossover):
    """單點交叉：交叉點之後的基因全部取自 mother"""

    requires_crossover_points = True

    def cross(self, genotype, child, mother, rng) -> None:
        genotype.crossover_chromosome_points(1, child, mother, rng)


class CrossoverMultiPoint(Crossover):
    """多點交叉：在排序後的交叉點之間交替取用 mother 的區段

    Attributes:
        number_of_crossovers: 交叉點數量 (上限為可用交叉點數)
    """

    requires_crossover_points = True

    def __init__(
        self,
        number_of_crossovers: int,
        elitism_size: int = 0,
        allow_duplicates: bool = True,
    ):
        super().__init__(elitism_size, allow_duplicates)
        if number_of_crossovers < 1:
            raise InvalidParameterError(
                "number_of_crossovers", number_of_crossovers, "must be at least 1"
            )
        self.number_of_crossovers = number_of_crossovers

    def cross(self, genotype, child, mother, rng) -> None:
        genotype.crossover_chromosome_points(self.number_of_crossovers, child, mother, rng)

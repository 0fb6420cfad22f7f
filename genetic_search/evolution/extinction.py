"""
滅絕事件 (Extinction Events)

當種群多樣性崩潰或長期停滯時，在不終止執行的前提下重新注入多樣性。
觸發門檻都是可調整的設定，沒有固定預設值。
"""

from abc import ABC, abstractmethod
import random
from typing import TYPE_CHECKING, Optional

from .exceptions import (
    InvalidParameterError,
    validate_fraction,
    validate_non_negative,
    validate_positive,
)

if TYPE_CHECKING:
    from genetic_search.genotype.base import Genotype
    from .engine import EvolveConfig
    from .generation import EvolveState


class Extinction(ABC):
    """滅絕事件基底類別

    引擎在終止檢查未終止時呼叫 should_trigger；若觸發則呼叫 call，
    並跳過該世代的選擇、交叉與突變，直接回到評估。
    """

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def should_trigger(self, state: "EvolveState", config: "EvolveConfig") -> bool:
        """是否在本世代觸發事件"""

    @abstractmethod
    def call(
        self,
        state: "EvolveState",
        genotype: "Genotype",
        config: "EvolveConfig",
        rng: random.Random,
    ) -> None:
        """就地修改 state.population"""


class MassExtinction(Extinction):
    """大滅絕

    觸發條件 (任一成立即觸發，且種群需達到目標大小)：
    - 適應度分數的種類數降到 cardinality_threshold 以下
    - 有分數染色體的適應度標準差降到 stddev_threshold 以下
    - 連續停滯世代數達到 stale_generations，且距離上一次事件至少同樣多個世代

    觸發後保留最佳的 survival_rate 比例 (至少一條)，其餘以新的隨機染色體補滿。

    Attributes:
        survival_rate: 存活比例 (0, 1]
        cardinality_threshold: 分數種類數門檻
        stddev_threshold: 標準差門檻
        stale_generations: 停滯世代數門檻
    """

    def __init__(
        self,
        survival_rate: float,
        cardinality_threshold: Optional[int] = None,
        stddev_threshold: Optional[float] = None,
        stale_generations: Optional[int] = None,
    ):
        validate_fraction("survival_rate", survival_rate)
        validate_non_negative("cardinality_threshold", cardinality_threshold)
        validate_positive("stale_generations", stale_generations)
        if stddev_threshold is not None and stddev_threshold < 0:
            raise InvalidParameterError("stddev_threshold", stddev_threshold, "must be at least 0")
        if cardinality_threshold is None and stddev_threshold is None and stale_generations is None:
            raise InvalidParameterError(
                "MassExtinction triggers",
                None,
                "need at least one of cardinality_threshold, stddev_threshold or stale_generations",
            )
        self.survival_rate = survival_rate
        self.cardinality_threshold = cardinality_threshold
        self.stddev_threshold = stddev_threshold
        self.stale_generations = stale_generations

    def should_trigger(self, state: "EvolveState", config: "EvolveConfig") -> bool:
        population = state.population
        if population.size < config.target_population_size:
            return False

        if (
            self.cardinality_threshold is not None
            and population.fitness_score_cardinality() <= self.cardinality_threshold
        ):
            return True

        scored = population.size - population.invalid_count()
        if (
            self.stddev_threshold is not None
            and scored >= 2
            and population.fitness_score_stddev() <= self.stddev_threshold
        ):
            return True

        if self.stale_generations is not None and state.stale_generations >= self.stale_generations:
            last = state.last_extinction_generation
            return last is None or state.current_generation - last >= self.stale_generations

        return False

    def call(self, state, genotype, config, rng) -> None:
        population = state.population
        population.sort_by_fitness(config.fitness_ordering)
        survivors = max(1, int(round(population.size * self.survival_rate)))
        for chromosome in population.truncate(survivors):
            genotype.release_chromosome(chromosome)
        refill = config.target_population_size - population.size
        population.extend([genotype.generate_random_chromosome(rng) for _ in range(refill)])

    def __repr__(self) -> str:
        return (
            f"MassExtinction(survival_rate={self.survival_rate}, "
            f"cardinality_threshold={self.cardinality_threshold}, "
            f"stddev_threshold={self.stddev_threshold}, "
            f"stale_generations={self.stale_generations})"
        )


class MassDegeneration(Extinction):
    """大退化

    當適應度分數的種類數降到 cardinality_threshold 以下時，
    對最佳染色體以外的每條染色體突變 number_of_mutations 個基因。

    Attributes:
        cardinality_threshold: 分數種類數門檻
        number_of_mutations: 每條染色體突變的基因數
    """

    def __init__(self, cardinality_threshold: int, number_of_mutations: int):
        validate_non_negative("cardinality_threshold", cardinality_threshold)
        validate_positive("number_of_mutations", number_of_mutations)
        self.cardinality_threshold = cardinality_threshold
        self.number_of_mutations = number_of_mutations

    def should_trigger(self, state: "EvolveState", config: "EvolveConfig") -> bool:
        population = state.population
        return (
            population.size >= config.target_population_size
            and population.fitness_score_cardinality() <= self.cardinality_threshold
        )

    def call(self, state, genotype, config, rng) -> None:
        best = state.population.best_chromosome(config.fitness_ordering)
        for chromosome in state.population:
            if chromosome is best:
                continue
            genotype.mutate_chromosome(chromosome, self.number_of_mutations, rng)

    def __repr__(self) -> str:
        return (
            f"MassDegeneration(cardinality_threshold={self.cardinality_threshold}, "
            f"number_of_mutations={self.number_of_mutations})"
        )

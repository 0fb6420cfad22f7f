"""
演化搜尋引擎 (Evolve Engine)

整合基因型、適應度、選擇、交叉、突變、滅絕事件與報告器的主引擎。

每個世代的狀態機：
Evaluating → Reporting → CheckingTermination → Selecting → Crossing → Mutating → Evaluating

所有設定錯誤都在建構時檢查，世代迴圈開始後不會再出現設定錯誤。
隨機來源在每次 call() 時以 rng_seed 重新建立，並明確傳給每個算子。
"""

from dataclasses import dataclass
import logging
import random
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Union

from .crossover import Crossover
from .exceptions import (
    InvalidParameterError,
    MissingTerminationConditionError,
    validate_non_negative,
    validate_population_size,
    validate_positive,
)
from .extinction import Extinction
from .fitness import Fitness, FitnessEvaluator, FunctionFitness
from .generation import (
    EvolvePhase,
    EvolveState,
    GenerationSnapshot,
    TerminationReason,
)
from .models import (
    FitnessOrdering,
    FitnessValue,
    Population,
    is_better_fitness,
    meets_target,
)
from .mutation import Mutate
from .population import PopulationGenerator
from .reporter import EvolveReporter, EvolveReporterNoop
from .selection import Select

if TYPE_CHECKING:
    from genetic_search.genotype.base import Genotype


logger = logging.getLogger(__name__)


@dataclass
class EvolveConfig:
    """演化配置

    至少需要設定一個終止條件。

    Attributes:
        target_population_size: 目標種群大小 (>= 2)
        max_generations: 最大世代數 (評估過的世代數)
        max_stale_generations: 連續未改善的最大世代數
        target_fitness_score: 目標分數
        valid_fitness_score: 分數必須達到此值才可成為最佳
        max_duration: 執行時間預算 (秒)，於世代邊界檢查
        fitness_ordering: 適應度排序方向
        max_chromosome_age: 染色體年齡上限，超過者在選擇時最先淘汰
        replace_on_equal_fitness: 同分時是否以新染色體取代記錄的最佳基因
        max_workers: 平行評估的工作執行緒數
        rng_seed: 隨機種子
    """
    target_population_size: int = 100
    max_generations: Optional[int] = None
    max_stale_generations: Optional[int] = None
    target_fitness_score: Optional[FitnessValue] = None
    valid_fitness_score: Optional[FitnessValue] = None
    max_duration: Optional[float] = None
    fitness_ordering: FitnessOrdering = FitnessOrdering.MAXIMIZE
    max_chromosome_age: Optional[int] = None
    replace_on_equal_fitness: bool = False
    max_workers: Optional[int] = None
    rng_seed: Optional[int] = None

    def validate(self) -> None:
        """驗證配置

        Raises:
            InvalidPopulationSizeError: 若 target_population_size < 2
            InvalidParameterError: 若任一上限為非正數
            MissingTerminationConditionError: 若未設定任何終止條件
        """
        validate_population_size(self.target_population_size)
        validate_positive("max_generations", self.max_generations)
        validate_positive("max_stale_generations", self.max_stale_generations)
        validate_positive("max_workers", self.max_workers)
        validate_non_negative("max_chromosome_age", self.max_chromosome_age)
        if self.max_duration is not None and self.max_duration <= 0:
            raise InvalidParameterError("max_duration", self.max_duration, "must be positive")
        if (
            self.target_fitness_score is None
            and self.max_generations is None
            and self.max_stale_generations is None
            and self.max_duration is None
        ):
            raise MissingTerminationConditionError()


@dataclass
class EvolveResult:
    """演化結果

    Attributes:
        best_genes: 最佳染色體的基因快照，從未出現有效分數時為 None
        best_fitness_score: 最佳分數
        best_generation: 最佳分數出現的世代
        termination_reason: 終止原因
        total_generations: 評估過的世代數 (最後世代編號 + 1)
        population: 終止時的種群 (已與基因型的共用儲存分離)
        fitness_calls: 適應度函數被呼叫的染色體總數
        extinction_count: 滅絕事件次數
        elapsed: 執行秒數
    """
    best_genes: Optional[List[Any]]
    best_fitness_score: Optional[FitnessValue]
    best_generation: Optional[int]
    termination_reason: TerminationReason
    total_generations: int
    population: Population
    fitness_calls: int
    extinction_count: int
    elapsed: float


class Evolve:
    """演化搜尋引擎

    Attributes:
        genotype: 基因型
        fitness: 適應度函數
        select: 選擇算子
        crossover: 交叉算子
        mutate: 突變算子
        config: 演化配置
        extinction: 滅絕事件 (可選)
        reporter: 報告器
        state: 最近一次執行的狀態
    """

    def __init__(
        self,
        genotype: "Genotype",
        fitness: Union[Fitness, Callable[..., Optional[FitnessValue]]],
        select: Select,
        crossover: Crossover,
        mutate: Mutate,
        config: EvolveConfig,
        extinction: Optional[Extinction] = None,
        reporter: Optional[EvolveReporter] = None,
    ):
        """初始化並驗證引擎

        Raises:
            EvolutionError: 任一設定錯誤 (配置、繁殖池、相容性或容量)
        """
        config.validate()
        pool_size = select.pool_size(config.target_population_size)
        crossover.validate(genotype, pool_size, config.target_population_size)
        # 峰值：繁殖池加上所有子代同時存在
        genotype.ensure_population_capacity(pool_size + config.target_population_size)

        if not isinstance(fitness, Fitness):
            fitness = FunctionFitness(fitness)

        self.genotype = genotype
        self.fitness = fitness
        self.select = select
        self.crossover = crossover
        self.mutate = mutate
        self.config = config
        self.extinction = extinction
        self.reporter = reporter or EvolveReporterNoop()
        self.state = EvolveState()

        self._population_generator = PopulationGenerator(genotype, config.target_population_size)
        self._fitness_evaluator = FitnessEvaluator(fitness, config.max_workers)

    @property
    def fitness_calls(self) -> int:
        return self._fitness_evaluator.calls

    def call(self) -> EvolveResult:
        """執行一次完整的演化

        Returns:
            演化結果
        """
        config = self.config
        rng = random.Random(config.rng_seed)
        self._fitness_evaluator.calls = 0
        self.genotype.reset_storage()

        state = EvolveState()
        self.state = state
        logger.info(
            f"Evolve start: {type(self.genotype).__name__}, "
            f"population {config.target_population_size}, seed {config.rng_seed}"
        )
        self.reporter.on_start(config)

        state.population = self._population_generator.generate_population(rng)

        while True:
            state.phase = EvolvePhase.EVALUATING
            self._fitness_evaluator.evaluate(state.population, self.genotype, state.current_generation)
            self._update_best(state)

            state.phase = EvolvePhase.REPORTING
            snapshot = GenerationSnapshot.from_state(state, config.fitness_ordering)
            self.reporter.on_new_generation(snapshot)
            logger.debug(
                f"generation {state.current_generation}: best {state.best_fitness_score}, "
                f"stale {state.stale_generations}"
            )

            state.phase = EvolvePhase.CHECKING_TERMINATION
            reason = self._termination_reason(state)
            if reason is not None:
                state.termination_reason = reason
                break

            if self.extinction is not None and self.extinction.should_trigger(state, config):
                self._extinction_event(state, rng)
                state.current_generation += 1
                continue

            state.phase = EvolvePhase.SELECTING
            state.population.increment_age()
            self.select.call(state.population, self.genotype, config, rng)

            state.phase = EvolvePhase.CROSSING
            self.crossover.call(state.population, self.genotype, config, rng)

            state.phase = EvolvePhase.MUTATING
            self.mutate.call(state.population, self.genotype, config, rng)

            state.current_generation += 1

        state.phase = EvolvePhase.TERMINATED
        # 結果種群不可與下一次執行共用儲存
        for chromosome in state.population:
            self.genotype.detach_chromosome(chromosome)
        final = GenerationSnapshot.from_state(state, config.fitness_ordering)
        self.reporter.on_finish(final)
        logger.info(
            f"Evolve finished: {state.termination_reason.value} at generation "
            f"{state.current_generation}, best {state.best_fitness_score} "
            f"(generation {state.best_generation})"
        )

        return EvolveResult(
            best_genes=state.best_genes,
            best_fitness_score=state.best_fitness_score,
            best_generation=state.best_generation,
            termination_reason=state.termination_reason,
            total_generations=state.current_generation + 1,
            population=state.population,
            fitness_calls=self._fitness_evaluator.calls,
            extinction_count=state.extinction_count,
            elapsed=state.elapsed,
        )

    def _is_acceptable(self, score: Optional[FitnessValue]) -> bool:
        """分數是否有資格成為最佳 (存在且不差於 valid_fitness_score)"""
        if score is None:
            return False
        valid = self.config.valid_fitness_score
        return valid is None or not is_better_fitness(valid, score, self.config.fitness_ordering)

    def _update_best(self, state: EvolveState) -> None:
        """以本世代最佳染色體更新最佳快照與停滯計數，並累計最差分數"""
        ordering = self.config.fitness_ordering
        worst = state.population.worst_chromosome(ordering)
        if worst is not None and is_better_fitness(
            state.worst_fitness_score, worst.fitness_score, ordering
        ):
            state.worst_fitness_score = worst.fitness_score
        elif worst is not None and state.worst_fitness_score is None:
            state.worst_fitness_score = worst.fitness_score

        candidate = state.population.best_chromosome(ordering)
        if candidate is None or not self._is_acceptable(candidate.fitness_score):
            state.stale_generations += 1
            return

        if is_better_fitness(candidate.fitness_score, state.best_fitness_score, ordering):
            state.best_genes = self.genotype.genes_as_list(candidate)
            state.best_fitness_score = candidate.fitness_score
            state.best_generation = state.current_generation
            state.stale_generations = 0
            self.reporter.on_new_best_chromosome(
                GenerationSnapshot.from_state(state, ordering)
            )
            return

        if (
            self.config.replace_on_equal_fitness
            and candidate.fitness_score == state.best_fitness_score
        ):
            state.best_genes = self.genotype.genes_as_list(candidate)
        state.stale_generations += 1

    def _termination_reason(self, state: EvolveState) -> Optional[TerminationReason]:
        config = self.config
        if config.target_fitness_score is not None and meets_target(
            state.best_fitness_score, config.target_fitness_score, config.fitness_ordering
        ):
            return TerminationReason.TARGET_FITNESS_SCORE_REACHED
        if config.max_generations is not None and state.current_generation + 1 >= config.max_generations:
            return TerminationReason.MAX_GENERATIONS_REACHED
        if (
            config.max_stale_generations is not None
            and state.stale_generations >= config.max_stale_generations
        ):
            return TerminationReason.MAX_STALE_GENERATIONS_REACHED
        if config.max_duration is not None and state.elapsed >= config.max_duration:
            return TerminationReason.MAX_DURATION_EXCEEDED
        return None

    def _extinction_event(self, state: EvolveState, rng: random.Random) -> None:
        name = self.extinction.name
        logger.info(f"generation {state.current_generation}: {name} triggered")
        self.reporter.on_extinction_event(
            name, GenerationSnapshot.from_state(state, self.config.fitness_ordering)
        )
        self.extinction.call(state, self.genotype, self.config, rng)
        state.extinction_count += 1
        state.last_extinction_generation = state.current_generation

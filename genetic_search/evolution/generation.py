"""
世代狀態 (Generation State)

記錄演化引擎在一次執行中的可變狀態，以及提供給報告器的唯讀世代快照。
"""

from dataclasses import dataclass, field
from enum import Enum
import time
from typing import Any, List, Optional

from .models import FitnessOrdering, FitnessValue, Population


class EvolvePhase(Enum):
    """演化引擎狀態機的階段"""
    INITIALIZING = "initializing"
    EVALUATING = "evaluating"
    REPORTING = "reporting"
    CHECKING_TERMINATION = "checking_termination"
    SELECTING = "selecting"
    CROSSING = "crossing"
    MUTATING = "mutating"
    TERMINATED = "terminated"


class TerminationReason(Enum):
    """終止原因，依檢查順序排列

    Attributes:
        TARGET_FITNESS_SCORE_REACHED: 最佳分數達到目標
        MAX_GENERATIONS_REACHED: 世代數達到上限
        MAX_STALE_GENERATIONS_REACHED: 連續未改善的世代數達到上限
        MAX_DURATION_EXCEEDED: 執行時間超過預算
    """
    TARGET_FITNESS_SCORE_REACHED = "target_fitness_score_reached"
    MAX_GENERATIONS_REACHED = "max_generations_reached"
    MAX_STALE_GENERATIONS_REACHED = "max_stale_generations_reached"
    MAX_DURATION_EXCEEDED = "max_duration_exceeded"


@dataclass
class EvolveState:
    """單次執行的可變狀態 (由引擎獨佔)

    最佳染色體以快照保存 (基因列表、分數、世代)，
    因此即使種群在滅絕事件中被替換，記錄的最佳分數仍然單調。

    Attributes:
        population: 目前種群
        current_generation: 目前世代編號 (從 0 開始)
        phase: 目前階段
        best_genes: 目前為止最佳染色體的基因快照
        best_fitness_score: 目前為止的最佳分數
        best_generation: 最佳分數出現的世代
        worst_fitness_score: 目前為止評估過的最差分數
        stale_generations: 連續未改善的世代數
        extinction_count: 已發生的滅絕事件數
        last_extinction_generation: 最近一次滅絕事件的世代
        termination_reason: 終止原因 (終止後才設定)
        started_at: 開始時間 (time.monotonic)
    """
    population: Population = field(default_factory=Population)
    current_generation: int = 0
    phase: EvolvePhase = EvolvePhase.INITIALIZING
    best_genes: Optional[List[Any]] = None
    best_fitness_score: Optional[FitnessValue] = None
    best_generation: Optional[int] = None
    worst_fitness_score: Optional[FitnessValue] = None
    stale_generations: int = 0
    extinction_count: int = 0
    last_extinction_generation: Optional[int] = None
    termination_reason: Optional[TerminationReason] = None
    started_at: float = field(default_factory=time.monotonic)

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started_at


@dataclass(frozen=True)
class GenerationSnapshot:
    """世代快照 (唯讀)

    Attributes:
        generation: 世代編號
        best_fitness_score: 目前為止的最佳分數
        best_generation: 最佳分數出現的世代
        worst_fitness_score: 目前為止評估過的最差分數
        population_best_score: 本世代種群中的最佳分數
        population_worst_score: 本世代種群中的最差分數
        population_size: 種群大小
        fitness_score_cardinality: 不同分數的數量
        invalid_count: 無分數的染色體數量
        stale_generations: 連續未改善的世代數
        elapsed: 已執行秒數
        termination_reason: 終止原因 (僅在結束時設定)
    """
    generation: int
    best_fitness_score: Optional[FitnessValue]
    best_generation: Optional[int]
    worst_fitness_score: Optional[FitnessValue]
    population_best_score: Optional[FitnessValue]
    population_worst_score: Optional[FitnessValue]
    population_size: int
    fitness_score_cardinality: int
    invalid_count: int
    stale_generations: int
    elapsed: float
    termination_reason: Optional[TerminationReason] = None

    @classmethod
    def from_state(cls, state: EvolveState, ordering: FitnessOrdering) -> "GenerationSnapshot":
        population = state.population
        best = population.best_chromosome(ordering)
        worst = population.worst_chromosome(ordering)
        return cls(
            generation=state.current_generation,
            best_fitness_score=state.best_fitness_score,
            best_generation=state.best_generation,
            worst_fitness_score=state.worst_fitness_score,
            population_best_score=best.fitness_score if best is not None else None,
            population_worst_score=worst.fitness_score if worst is not None else None,
            population_size=population.size,
            fitness_score_cardinality=population.fitness_score_cardinality(),
            invalid_count=population.invalid_count(),
            stale_generations=state.stale_generations,
            elapsed=state.elapsed,
            termination_reason=state.termination_reason,
        )

"""
演化報告器 (Evolve Reporters)

報告器在控制執行緒上同步接收唯讀的世代快照，不得修改引擎狀態。
"""

from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING, List, Optional, Tuple

from .generation import GenerationSnapshot

if TYPE_CHECKING:
    from .engine import EvolveConfig


logger = logging.getLogger(__name__)


class EvolveReporter:
    """報告器基底類別 (所有鉤子預設不做任何事)"""

    def on_start(self, config: "EvolveConfig") -> None:
        pass

    def on_new_generation(self, snapshot: GenerationSnapshot) -> None:
        pass

    def on_new_best_chromosome(self, snapshot: GenerationSnapshot) -> None:
        pass

    def on_extinction_event(self, event: str, snapshot: GenerationSnapshot) -> None:
        pass

    def on_finish(self, snapshot: GenerationSnapshot) -> None:
        pass


class EvolveReporterNoop(EvolveReporter):
    """不輸出任何內容的報告器"""


class EvolveReporterSimple(EvolveReporter):
    """以 logging 輸出進度的報告器

    Attributes:
        period: 每隔幾個世代輸出一次進度
        level: 日誌等級
    """

    def __init__(self, period: int = 1, level: int = logging.INFO):
        if period < 1:
            raise ValueError(f"Period must be at least 1, got {period}")
        self.period = period
        self.level = level

    def on_start(self, config: "EvolveConfig") -> None:
        logger.log(self.level, f"Evolve start: {config}")

    def on_new_generation(self, snapshot: GenerationSnapshot) -> None:
        if snapshot.generation % self.period != 0:
            return
        logger.log(
            self.level,
            f"generation {snapshot.generation}: best {snapshot.best_fitness_score} "
            f"(generation {snapshot.best_generation}), worst {snapshot.worst_fitness_score}, "
            f"population best {snapshot.population_best_score} "
            f"worst {snapshot.population_worst_score}, "
            f"cardinality {snapshot.fitness_score_cardinality}, "
            f"invalid {snapshot.invalid_count}, stale {snapshot.stale_generations}",
        )

    def on_new_best_chromosome(self, snapshot: GenerationSnapshot) -> None:
        logger.log(
            self.level,
            f"generation {snapshot.generation}: new best {snapshot.best_fitness_score}",
        )

    def on_extinction_event(self, event: str, snapshot: GenerationSnapshot) -> None:
        logger.log(self.level, f"generation {snapshot.generation}: {event}")

    def on_finish(self, snapshot: GenerationSnapshot) -> None:
        reason = snapshot.termination_reason.value if snapshot.termination_reason else None
        logger.log(
            self.level,
            f"Evolve finished after generation {snapshot.generation}: {reason}, "
            f"best {snapshot.best_fitness_score} in {snapshot.elapsed:.3f}s",
        )


@dataclass
class EvolveReporterHistory(EvolveReporter):
    """收集所有世代快照的報告器

    Attributes:
        generations: 每個世代的快照
        new_best: 每次出現新最佳分數時的快照
        extinction_events: (事件名稱, 世代) 列表
        final: 結束時的快照
    """
    generations: List[GenerationSnapshot] = field(default_factory=list)
    new_best: List[GenerationSnapshot] = field(default_factory=list)
    extinction_events: List[Tuple[str, int]] = field(default_factory=list)
    final: Optional[GenerationSnapshot] = None

    def on_start(self, config: "EvolveConfig") -> None:
        self.generations.clear()
        self.new_best.clear()
        self.extinction_events.clear()
        self.final = None

    def on_new_generation(self, snapshot: GenerationSnapshot) -> None:
        self.generations.append(snapshot)

    def on_new_best_chromosome(self, snapshot: GenerationSnapshot) -> None:
        self.new_best.append(snapshot)

    def on_extinction_event(self, event: str, snapshot: GenerationSnapshot) -> None:
        self.extinction_events.append((event, snapshot.generation))

    def on_finish(self, snapshot: GenerationSnapshot) -> None:
        self.final = snapshot

    def best_fitness_scores(self) -> List[Optional[int]]:
        """每個世代記錄的最佳分數 (目前為止)"""
        return [snapshot.best_fitness_score for snapshot in self.generations]

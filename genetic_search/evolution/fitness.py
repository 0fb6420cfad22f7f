"""
適應度評估器 (Fitness Evaluator)

負責計算染色體的適應度分數。只評估目前沒有分數的染色體，
因此基因未改變的染色體 (例如保留的精英) 不會被重新計算。

評估可以在控制執行緒上依序執行，或分割給每世代建立一次的
執行緒池平行執行；兩者產生完全相同的分數指派。
"""

from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from functools import partial
import logging
import numbers
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Sequence

from .exceptions import (
    FitnessEvaluationError,
    InvalidFitnessValueError,
    validate_positive,
)
from .models import Chromosome, FitnessValue, Population, to_fitness_value

if TYPE_CHECKING:
    from genetic_search.genotype.base import Genotype


logger = logging.getLogger(__name__)


class Fitness(ABC):
    """適應度函數基底類別

    實作必須只依賴染色體的基因 (參照透明)，平行評估的確定性才能成立。
    回傳 None 表示染色體無效，排序時永遠視為最差。
    """

    @abstractmethod
    def calculate_for_chromosome(
        self,
        chromosome: Chromosome,
        genotype: "Genotype",
    ) -> Optional[FitnessValue]:
        """計算單一染色體的適應度"""

    def calculate_for_population(
        self,
        chromosomes: Sequence[Chromosome],
        genotype: "Genotype",
    ) -> List[Optional[FitnessValue]]:
        """批次計算適應度

        預設逐一呼叫 calculate_for_chromosome。矩陣基因型可覆寫此方法，
        以 genotype.rows(chromosomes) 一次取得整塊基因做向量化計算。

        Returns:
            與 chromosomes 順序一致的分數列表
        """
        return [self.calculate_for_chromosome(chromosome, genotype) for chromosome in chromosomes]


class FunctionFitness(Fitness):
    """將一般函數包裝為 Fitness

    Attributes:
        function: 接收 (chromosome, genotype) 並回傳分數或 None 的函數
    """

    def __init__(self, function: Callable[[Chromosome, "Genotype"], Optional[FitnessValue]]):
        self.function = function

    def calculate_for_chromosome(self, chromosome, genotype):
        return self.function(chromosome, genotype)


class CountTrue(Fitness):
    """計算為真的基因數量 (二元與位元基因型的基準問題)"""

    def calculate_for_chromosome(self, chromosome, genotype):
        return sum(1 for gene in genotype.genes_as_list(chromosome) if gene)


class SimpleSum(Fitness):
    """基因值總和

    浮點基因以 precision 換算成整數刻度的適應度。

    Attributes:
        precision: 刻度精度，預設為 1.0
    """

    def __init__(self, precision: float = 1.0):
        if precision <= 0:
            raise ValueError(f"Precision must be positive, got {precision}")
        self.precision = precision

    def calculate_for_chromosome(self, chromosome, genotype):
        return to_fitness_value(float(sum(genotype.genes_as_list(chromosome))), self.precision)


def validate_fitness_value(value: Any) -> Optional[FitnessValue]:
    """檢查並正規化適應度回傳值

    Args:
        value: 適應度函數的回傳值

    Returns:
        None 或 int

    Raises:
        InvalidFitnessValueError: 若回傳值不是 None 也不是整數 (bool 亦不接受)
    """
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidFitnessValueError(value)
    return int(value)


class FitnessEvaluator:
    """適應度評估器

    Attributes:
        fitness: 適應度函數
        max_workers: 平行評估的工作執行緒數；None 或 1 表示依序評估
        calls: 累計被評估的染色體數量
    """

    def __init__(self, fitness: Fitness, max_workers: Optional[int] = None):
        """初始化適應度評估器

        Args:
            fitness: 適應度函數
            max_workers: 工作執行緒數，預設為 None (依序評估)

        Raises:
            InvalidParameterError: 若 max_workers < 1
        """
        validate_positive("max_workers", max_workers)
        self.fitness = fitness
        self.max_workers = max_workers
        self.calls = 0

    @property
    def is_parallel(self) -> bool:
        return self.max_workers is not None and self.max_workers > 1

    def evaluate(
        self,
        population: Population,
        genotype: "Genotype",
        generation: Optional[int] = None,
    ) -> int:
        """評估所有沒有分數的染色體

        分數在控制執行緒上依種群順序寫回，工作執行緒只讀取基因。

        Args:
            population: 種群
            genotype: 基因型
            generation: 目前世代 (僅用於錯誤訊息)

        Returns:
            本次評估的染色體數量

        Raises:
            FitnessEvaluationError: 若適應度函數拋出例外
            InvalidFitnessValueError: 若適應度函數回傳非法的值
        """
        pending = population.unscored()
        if not pending:
            return 0

        try:
            if self.is_parallel:
                scores = self._evaluate_parallel(pending, genotype)
            else:
                scores = self._evaluate_chunk(pending, genotype)
        except Exception as e:
            logger.error(f"Fitness evaluation failed in generation {generation}: {e!r}")
            raise FitnessEvaluationError(generation, e) from e

        # 全部通過驗證後才寫回，失敗的世代不留下部分分數
        values = [validate_fitness_value(score) for score in scores]
        for chromosome, value in zip(pending, values):
            chromosome.fitness_score = value
        self.calls += len(pending)
        return len(pending)

    def _evaluate_chunk(
        self,
        chromosomes: List[Chromosome],
        genotype: "Genotype",
    ) -> List[Any]:
        scores = list(self.fitness.calculate_for_population(chromosomes, genotype))
        if len(scores) != len(chromosomes):
            raise ValueError(
                f"calculate_for_population returned {len(scores)} scores "
                f"for {len(chromosomes)} chromosomes"
            )
        return scores

    def _evaluate_parallel(
        self,
        chromosomes: List[Chromosome],
        genotype: "Genotype",
    ) -> List[Any]:
        """將染色體切成 max_workers 個互不重疊的連續區塊平行評估

        執行緒池只存活於本次呼叫；executor.map 依提交順序回傳結果。
        """
        chunk_size = -(-len(chromosomes) // self.max_workers)
        chunks = [
            chromosomes[start:start + chunk_size]
            for start in range(0, len(chromosomes), chunk_size)
        ]
        scores: List[Any] = []
        with ThreadPoolExecutor(max_workers=len(chunks)) as executor:
            for chunk_scores in executor.map(partial(self._evaluate_chunk, genotype=genotype), chunks):
                scores.extend(chunk_scores)
        return scores

"""
矩陣基因型 (Matrix Genotype)

整個種群的基因存放在一塊連續的 numpy 緩衝區，形狀為
(max_population_size, genes_size)。每條染色體佔用一列，
其 genes 屬性即為該列的視圖 (view)，row_id 為列編號。

空閒的列以堆疊管理：新染色體從堆疊取列，離開種群時歸還。
緩衝區大小固定，因此引擎在建構時會以單一世代的峰值種群大小
呼叫 ensure_population_capacity 進行檢查。
"""

import random
from typing import Any, Hashable, List, Optional, Sequence, Tuple

import numpy as np

from genetic_search.evolution.exceptions import (
    InvalidGenotypeError,
    PopulationCapacityError,
)
from genetic_search.evolution.models import Chromosome

from .models import GeneType
from .range_genotype import RangeGenotype, RangeLike


class MatrixGenotype(RangeGenotype):
    """矩陣基因型

    等位基因域與 RangeGenotype 相同 (單一 GeneBounds)，差別只在儲存佈局。
    INTEGER 邊界使用 int64 緩衝區，FLOAT 邊界使用 float64 緩衝區。

    Attributes:
        genes_size: 每條染色體的基因數
        max_population_size: 緩衝區可容納的染色體數量上限
        allele_range: 基因邊界
        allele_mutation_range: 相對突變的位移範圍，可選
    """

    def __init__(
        self,
        genes_size: int,
        max_population_size: int,
        allele_range: RangeLike,
        allele_mutation_range: Optional[Tuple[float, float]] = None,
        seed_genes_list: Optional[List[List[float]]] = None,
    ):
        if max_population_size < 1:
            raise InvalidGenotypeError(
                type(self).__name__,
                f"max_population_size must be at least 1, got {max_population_size}",
            )
        super().__init__(genes_size, allele_range, allele_mutation_range, seed_genes_list)
        self.max_population_size = max_population_size
        dtype = np.int64 if self.allele_range.gene_type == GeneType.INTEGER else np.float64
        self._buffer = np.zeros((max_population_size, genes_size), dtype=dtype)
        self._free_rows: List[int] = []
        self.reset_storage()

    # ------------------------------------------------------------------
    # 儲存
    # ------------------------------------------------------------------

    @property
    def buffer(self) -> np.ndarray:
        """整塊連續緩衝區 (供外部加速器直接存取)"""
        return self._buffer

    @property
    def free_row_count(self) -> int:
        return len(self._free_rows)

    def _acquire_row(self) -> int:
        if not self._free_rows:
            raise PopulationCapacityError(
                self.max_population_size, self.max_population_size + 1
            )
        return self._free_rows.pop()

    def chromosome_from_genes(self, genes: Any) -> Chromosome:
        row_id = self._acquire_row()
        self._buffer[row_id] = genes
        return Chromosome(genes=self._buffer[row_id], row_id=row_id)

    def clone_chromosome(self, chromosome: Chromosome) -> Chromosome:
        row_id = self._acquire_row()
        self._buffer[row_id] = chromosome.genes
        return Chromosome(
            genes=self._buffer[row_id],
            fitness_score=chromosome.fitness_score,
            age=chromosome.age,
            row_id=row_id,
        )

    def release_chromosome(self, chromosome: Chromosome) -> None:
        if chromosome.row_id is None:
            return
        self._free_rows.append(chromosome.row_id)
        chromosome.row_id = None

    def detach_chromosome(self, chromosome: Chromosome) -> None:
        """把列視圖複製成獨立陣列並交回該列

        分離後的染色體不再出現在 rows() 或 buffer 中，之後的執行也不會覆寫它。
        """
        if chromosome.row_id is None:
            return
        chromosome.genes = np.array(chromosome.genes, copy=True)
        self.release_chromosome(chromosome)

    def ensure_population_capacity(self, peak_population_size: int) -> None:
        if peak_population_size > self.max_population_size:
            raise PopulationCapacityError(self.max_population_size, peak_population_size)

    def reset_storage(self) -> None:
        # 反序入堆疊，使 pop() 先取得第 0 列
        self._free_rows = list(range(self.max_population_size - 1, -1, -1))

    def rows(self, chromosomes: Sequence[Chromosome]) -> np.ndarray:
        """以一次 fancy indexing 取得多條染色體的基因矩陣 (複本)"""
        row_ids = np.fromiter(
            (chromosome.row_id for chromosome in chromosomes),
            dtype=np.intp,
            count=len(chromosomes),
        )
        return self._buffer[row_ids]

    def genes_as_list(self, chromosome: Chromosome) -> List[Any]:
        return np.asarray(chromosome.genes).tolist()

    def genes_key(self, chromosome: Chromosome) -> Hashable:
        return tuple(self.genes_as_list(chromosome))

    # ------------------------------------------------------------------
    # 交叉
    # ------------------------------------------------------------------

    def crossover_chromosome_indexes(
        self,
        child: Chromosome,
        mother: Chromosome,
        indexes: Sequence[int],
    ) -> None:
        if len(indexes) > 0:
            positions = np.asarray(indexes, dtype=np.intp)
            child.genes[positions] = mother.genes[positions]
        child.taint()

    # ------------------------------------------------------------------
    # 鄰域
    # ------------------------------------------------------------------

    def neighbouring_chromosomes(
        self,
        chromosome: Chromosome,
        rng: random.Random,
    ) -> List[Chromosome]:
        """鄰居不佔用緩衝區列：回傳的染色體持有獨立的 numpy 陣列且 row_id 為 None"""
        neighbours = []
        for index in range(self.genes_size):
            for value in self._neighbour_values(chromosome.genes[index], index, rng):
                genes = np.array(chromosome.genes, copy=True)
                genes[index] = value
                neighbours.append(Chromosome(genes=genes))
        return neighbours

    def __repr__(self) -> str:
        return (
            f"MatrixGenotype(genes_size={self.genes_size}, "
            f"max_population_size={self.max_population_size}, "
            f"allele_range={self.allele_range})"
        )

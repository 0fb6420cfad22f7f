"""
基因型抽象 (Genotype Abstraction)

定義基因空間與其底層算子的共同介面。演化引擎只依賴此介面，
不依賴任何特定的基因儲存佈局。
"""

from abc import ABC, abstractmethod
import copy
import random
from typing import Any, Hashable, Iterator, List, Optional, Sequence, Tuple

from genetic_search.evolution.exceptions import InvalidGenotypeError
from genetic_search.evolution.models import Chromosome


def point_segments(points: Sequence[int], genes_size: int) -> Iterator[Tuple[int, int]]:
    """將已排序的交叉點兩兩配對成要交換的區段

    (p0, p1), (p2, p3), ...；若點數為奇數，最後一段延伸到染色體末端。
    """
    for i in range(0, len(points), 2):
        start = points[i]
        end = points[i + 1] if i + 1 < len(points) else genes_size
        yield start, end


class Genotype(ABC):
    """基因型基底類別

    定義 genes_size 個基因位置與等位基因域，並提供隨機生成、突變、
    交叉與鄰域列舉等算子。預設實作適用於以 list 儲存基因的佈局。

    Attributes:
        genes_size: 每條染色體的基因數
        seed_genes_list: 種子基因列表，非空時隨機生成改為從中挑選
    """

    def __init__(
        self,
        genes_size: int,
        seed_genes_list: Optional[List[Any]] = None,
    ):
        if genes_size < 1:
            raise InvalidGenotypeError(
                type(self).__name__, f"genes_size must be at least 1, got {genes_size}"
            )
        self.genes_size = genes_size
        self.seed_genes_list = list(seed_genes_list or [])

    def _validate_seed_genes(self) -> None:
        for genes in self.seed_genes_list:
            if not self.is_valid_genes(genes):
                raise InvalidGenotypeError(
                    type(self).__name__, f"seed genes {genes!r} violate the allele domain"
                )

    # ------------------------------------------------------------------
    # 生成與儲存
    # ------------------------------------------------------------------

    @abstractmethod
    def sample_genes(self, rng: random.Random) -> Any:
        """在等位基因域內隨機取樣一組基因"""

    @abstractmethod
    def is_valid_genes(self, genes: Any) -> bool:
        """基因是否滿足長度、等位基因域與唯一性約束"""

    def random_genes(self, rng: random.Random) -> Any:
        if self.seed_genes_list:
            return copy.copy(rng.choice(self.seed_genes_list))
        return self.sample_genes(rng)

    def generate_random_chromosome(self, rng: random.Random) -> Chromosome:
        """生成一條隨機染色體 (未評估、年齡 0)"""
        return self.chromosome_from_genes(self.random_genes(rng))

    def chromosome_from_genes(self, genes: Any) -> Chromosome:
        return Chromosome(genes=list(genes))

    def clone_chromosome(self, chromosome: Chromosome) -> Chromosome:
        """複製染色體，保留適應度分數與年齡"""
        return Chromosome(
            genes=list(chromosome.genes),
            fitness_score=chromosome.fitness_score,
            age=chromosome.age,
        )

    def release_chromosome(self, chromosome: Chromosome) -> None:
        """染色體離開種群時的儲存回收點"""

    def detach_chromosome(self, chromosome: Chromosome) -> None:
        """讓染色體不再依賴基因型的共用儲存 (執行結束後保留結果用)"""

    def ensure_population_capacity(self, peak_population_size: int) -> None:
        """確認儲存空間足以容納一個世代的峰值種群"""

    def reset_storage(self) -> None:
        """新的一輪演化開始前釋放所有儲存"""

    def genes_as_list(self, chromosome: Chromosome) -> List[Any]:
        """基因的唯讀 list 快照"""
        return list(chromosome.genes)

    def genes_key(self, chromosome: Chromosome) -> Hashable:
        return tuple(self.genes_as_list(chromosome))

    def is_valid_chromosome(self, chromosome: Chromosome) -> bool:
        return self.is_valid_genes(chromosome.genes)

    # ------------------------------------------------------------------
    # 突變
    # ------------------------------------------------------------------

    def sample_gene_indexes(self, count: int, rng: random.Random) -> List[int]:
        """取樣 count 個互不重複的基因位置 (上限為 genes_size)"""
        return rng.sample(range(self.genes_size), min(count, self.genes_size))

    @abstractmethod
    def mutate_chromosome(
        self,
        chromosome: Chromosome,
        number_of_genes_to_mutate: int,
        rng: random.Random,
    ) -> None:
        """替換選中位置的基因值，並清除染色體的快取分數"""

    # ------------------------------------------------------------------
    # 交叉
    # ------------------------------------------------------------------

    def crossover_indexes(self) -> range:
        """可做基因交叉的位置；不支援時為空"""
        return range(self.genes_size)

    def crossover_points(self) -> List[int]:
        """可做點交叉的邊界；不支援時為空"""
        return list(range(1, self.genes_size))

    @property
    def has_crossover_indexes(self) -> bool:
        return len(self.crossover_indexes()) > 0

    @property
    def has_crossover_points(self) -> bool:
        return len(self.crossover_points()) > 0

    def crossover_chromosome_indexes(
        self,
        child: Chromosome,
        mother: Chromosome,
        indexes: Sequence[int],
    ) -> None:
        """將 mother 在 indexes 位置的基因複製到 child"""
        for index in indexes:
            child.genes[index] = mother.genes[index]
        child.taint()

    def crossover_chromosome_segment(
        self,
        child: Chromosome,
        mother: Chromosome,
        start: int,
        end: int,
    ) -> None:
        child.genes[start:end] = mother.genes[start:end]

    def crossover_chromosome_genes(
        self,
        number_of_crossovers: int,
        child: Chromosome,
        mother: Chromosome,
        rng: random.Random,
    ) -> None:
        """在互不重複的隨機位置上取用 mother 的基因"""
        indexes = self.crossover_indexes()
        sampled = rng.sample(indexes, min(number_of_crossovers, len(indexes)))
        self.crossover_chromosome_indexes(child, mother, sampled)

    def crossover_chromosome_points(
        self,
        number_of_crossovers: int,
        child: Chromosome,
        mother: Chromosome,
        rng: random.Random,
    ) -> None:
        """取樣交叉點並交替取用 mother 的區段"""
        points = self.crossover_points()
        sampled = sorted(rng.sample(points, min(number_of_crossovers, len(points))))
        for start, end in point_segments(sampled, self.genes_size):
            self.crossover_chromosome_segment(child, mother, start, end)
        child.taint()

    # ------------------------------------------------------------------
    # 鄰域
    # ------------------------------------------------------------------

    @abstractmethod
    def neighbouring_chromosomes(
        self,
        chromosome: Chromosome,
        rng: random.Random,
    ) -> List[Chromosome]:
        """列舉與 chromosome 相差一次最小變動的所有鄰居"""

    @property
    @abstractmethod
    def neighbouring_population_size(self) -> int:
        """neighbouring_chromosomes 回傳的鄰居數量"""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(genes_size={self.genes_size})"

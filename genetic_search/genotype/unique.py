"""
唯一值基因型 (Unique Genotypes)

UniqueGenotype: 基因為 allele_list 的一個排列，每個等位基因恰好出現一次。
MultiUniqueGenotype: 基因為多個排列依序串接而成，集合的順序固定。

突變一律以成對交換完成，以維持排列不變式。
"""

from collections import Counter
from itertools import combinations
import random
from typing import Any, List, Optional, Sequence

from genetic_search.evolution.exceptions import InvalidGenotypeError
from genetic_search.evolution.models import Chromosome

from .base import Genotype


def _swap_pairs(genes: List[Any], indexes: Sequence[int], offset: int = 0) -> None:
    for first, second in zip(indexes[0::2], indexes[1::2]):
        genes[offset + first], genes[offset + second] = genes[offset + second], genes[offset + first]


class UniqueGenotype(Genotype):
    """唯一值基因型

    genes_size 等於 allele_list 的長度。隨機生成時將 allele_list 洗牌；
    突變時交換兩個基因的位置。不支援基因交叉或點交叉，因為兩者都會破壞唯一性。

    Attributes:
        allele_list: 等位基因列表
    """

    def __init__(
        self,
        allele_list: Sequence[Any],
        seed_genes_list: Optional[List[List[Any]]] = None,
    ):
        if not allele_list:
            raise InvalidGenotypeError(type(self).__name__, "allele_list must not be empty")
        super().__init__(len(allele_list), seed_genes_list)
        self.allele_list = list(allele_list)
        self._allele_counts = Counter(self.allele_list)
        self._validate_seed_genes()

    def sample_genes(self, rng: random.Random) -> List[Any]:
        genes = list(self.allele_list)
        rng.shuffle(genes)
        return genes

    def is_valid_genes(self, genes: Any) -> bool:
        return len(genes) == self.genes_size and Counter(genes) == self._allele_counts

    def mutate_chromosome(
        self,
        chromosome: Chromosome,
        number_of_genes_to_mutate: int,
        rng: random.Random,
    ) -> None:
        # 每次突變交換一對基因
        indexes = self.sample_gene_indexes(number_of_genes_to_mutate * 2, rng)
        _swap_pairs(chromosome.genes, indexes)
        chromosome.taint()

    def crossover_indexes(self) -> range:
        return range(0)

    def crossover_points(self) -> List[int]:
        return []

    def neighbouring_chromosomes(
        self,
        chromosome: Chromosome,
        rng: random.Random,
    ) -> List[Chromosome]:
        neighbours = []
        for first, second in combinations(range(self.genes_size), 2):
            genes = list(chromosome.genes)
            genes[first], genes[second] = genes[second], genes[first]
            neighbours.append(self.chromosome_from_genes(genes))
        return neighbours

    @property
    def neighbouring_population_size(self) -> int:
        return self.genes_size * (self.genes_size - 1) // 2


class MultiUniqueGenotype(Genotype):
    """多重唯一值基因型

    genes_size 為所有 allele_lists 長度之和。每個集合各自洗牌後串接，
    突變時以集合長度為權重挑選集合，並在集合內交換一對基因。
    僅支援在集合邊界上的點交叉。

    Attributes:
        allele_lists: 各集合的等位基因列表
        allele_list_offsets: 各集合在染色體中的起始位置
    """

    def __init__(
        self,
        allele_lists: Sequence[Sequence[Any]],
        seed_genes_list: Optional[List[List[Any]]] = None,
    ):
        if not allele_lists or any(len(allele_list) == 0 for allele_list in allele_lists):
            raise InvalidGenotypeError(
                type(self).__name__, "allele_lists must be non-empty and contain non-empty lists"
            )
        self.allele_lists = [list(allele_list) for allele_list in allele_lists]
        self.allele_list_sizes = [len(allele_list) for allele_list in self.allele_lists]
        self.allele_list_offsets = []
        offset = 0
        for size in self.allele_list_sizes:
            self.allele_list_offsets.append(offset)
            offset += size
        super().__init__(offset, seed_genes_list)
        self._allele_counts = [Counter(allele_list) for allele_list in self.allele_lists]
        self._validate_seed_genes()

    def _sets(self, genes: Sequence[Any]):
        for offset, size in zip(self.allele_list_offsets, self.allele_list_sizes):
            yield genes[offset:offset + size]

    def sample_genes(self, rng: random.Random) -> List[Any]:
        genes: List[Any] = []
        for allele_list in self.allele_lists:
            shuffled = list(allele_list)
            rng.shuffle(shuffled)
            genes.extend(shuffled)
        return genes

    def is_valid_genes(self, genes: Any) -> bool:
        if len(genes) != self.genes_size:
            return False
        return all(
            Counter(gene_set) == counts
            for gene_set, counts in zip(self._sets(genes), self._allele_counts)
        )

    def mutate_chromosome(
        self,
        chromosome: Chromosome,
        number_of_genes_to_mutate: int,
        rng: random.Random,
    ) -> None:
        set_indexes = rng.choices(
            range(len(self.allele_lists)),
            weights=self.allele_list_sizes,
            k=number_of_genes_to_mutate,
        )
        counts = Counter(set_indexes)
        for set_index in sorted(counts):
            size = self.allele_list_sizes[set_index]
            indexes = rng.sample(range(size), min(counts[set_index] * 2, size))
            _swap_pairs(chromosome.genes, indexes, self.allele_list_offsets[set_index])
        chromosome.taint()

    def crossover_indexes(self) -> range:
        return range(0)

    def crossover_points(self) -> List[int]:
        return self.allele_list_offsets[1:]

    def neighbouring_chromosomes(
        self,
        chromosome: Chromosome,
        rng: random.Random,
    ) -> List[Chromosome]:
        neighbours = []
        for offset, size in zip(self.allele_list_offsets, self.allele_list_sizes):
            for first, second in combinations(range(offset, offset + size), 2):
                genes = list(chromosome.genes)
                genes[first], genes[second] = genes[second], genes[first]
                neighbours.append(self.chromosome_from_genes(genes))
        return neighbours

    @property
    def neighbouring_population_size(self) -> int:
        return sum(size * (size - 1) // 2 for size in self.allele_list_sizes)

"""
數值範圍基因型 (Range Genotypes)

RangeGenotype: 所有基因共用同一個 GeneBounds。
MultiRangeGenotype: 每個基因擁有自己的 GeneBounds。

未設定 allele_mutation_range 時，突變會在邊界內重新取樣；
設定後改為相對位移，位移量在 allele_mutation_range 內取樣，正負號隨機，
結果 clamp 到邊界內。
"""

import random
from typing import Any, List, Optional, Sequence, Tuple, Union

from genetic_search.evolution.exceptions import InvalidGenotypeError
from genetic_search.evolution.models import Chromosome

from .base import Genotype
from .models import GeneBounds, GeneType, parse_bounds


RangeLike = Union[GeneBounds, Tuple[float, float]]


def _validate_mutation_range(
    genotype_name: str,
    allele_mutation_range: Optional[Tuple[float, float]],
) -> None:
    if allele_mutation_range is None:
        return
    low, high = allele_mutation_range
    if low < 0 or low > high:
        raise InvalidGenotypeError(
            genotype_name,
            f"allele_mutation_range must satisfy 0 <= low <= high, got {allele_mutation_range}",
        )


class RangeGenotype(Genotype):
    """數值範圍基因型

    Attributes:
        genes_size: 每條染色體的基因數
        allele_range: 基因邊界 (GeneBounds 或 (min, max) 元組)
        allele_mutation_range: 相對突變的位移範圍 (low, high)，可選
    """

    def __init__(
        self,
        genes_size: int,
        allele_range: RangeLike,
        allele_mutation_range: Optional[Tuple[float, float]] = None,
        seed_genes_list: Optional[List[List[float]]] = None,
    ):
        super().__init__(genes_size, seed_genes_list)
        self.allele_range = parse_bounds(allele_range)
        if self.allele_range.is_empty():
            raise InvalidGenotypeError(
                type(self).__name__, f"allele_range {allele_range} is empty"
            )
        _validate_mutation_range(type(self).__name__, allele_mutation_range)
        self.allele_mutation_range = allele_mutation_range
        self._validate_seed_genes()

    def bounds_for(self, index: int) -> GeneBounds:
        return self.allele_range

    def sample_genes(self, rng: random.Random) -> List[float]:
        return [self.bounds_for(index).sample(rng) for index in range(self.genes_size)]

    def is_valid_genes(self, genes: Any) -> bool:
        return len(genes) == self.genes_size and all(
            self.bounds_for(index).validate(gene) for index, gene in enumerate(genes)
        )

    def mutation_range_for(self, index: int) -> Optional[Tuple[float, float]]:
        return self.allele_mutation_range

    def mutate_gene(self, genes: List[float], index: int, rng: random.Random) -> None:
        bounds = self.bounds_for(index)
        distance_range = self.mutation_range_for(index)
        if distance_range is None:
            genes[index] = bounds.sample(rng)
        else:
            genes[index] = bounds.shift(genes[index], distance_range, rng)

    def mutate_chromosome(
        self,
        chromosome: Chromosome,
        number_of_genes_to_mutate: int,
        rng: random.Random,
    ) -> None:
        for index in self.sample_gene_indexes(number_of_genes_to_mutate, rng):
            self.mutate_gene(chromosome.genes, index, rng)
        chromosome.taint()

    def _neighbour_values(self, value: float, index: int, rng: random.Random) -> List[float]:
        bounds = self.bounds_for(index)
        distance_range = self.mutation_range_for(index)
        if distance_range is not None:
            low, high = distance_range
            distance = rng.uniform(low, high)
            if bounds.gene_type == GeneType.INTEGER:
                distance = max(1, int(round(distance)))
        elif bounds.gene_type == GeneType.INTEGER:
            distance = 1
        else:
            return [bounds.sample(rng), bounds.sample(rng)]
        return [bounds.clamp(value + distance), bounds.clamp(value - distance)]

    def neighbouring_chromosomes(
        self,
        chromosome: Chromosome,
        rng: random.Random,
    ) -> List[Chromosome]:
        """每個基因產生向上與向下兩個鄰居 (在邊界上兩者可能與原值相同)"""
        neighbours = []
        for index in range(self.genes_size):
            for value in self._neighbour_values(chromosome.genes[index], index, rng):
                genes = list(chromosome.genes)
                genes[index] = value
                neighbours.append(self.chromosome_from_genes(genes))
        return neighbours

    @property
    def neighbouring_population_size(self) -> int:
        return 2 * self.genes_size

    def __repr__(self) -> str:
        return (
            f"RangeGenotype(genes_size={self.genes_size}, allele_range={self.allele_range}, "
            f"allele_mutation_range={self.allele_mutation_range})"
        )


class MultiRangeGenotype(RangeGenotype):
    """多範圍基因型

    genes_size 等於 allele_ranges 的數量。突變時以範圍寬度為權重挑選基因。

    Attributes:
        allele_ranges: 每個基因位置的 GeneBounds
        allele_mutation_ranges: 每個基因位置的相對突變範圍，可選
    """

    def __init__(
        self,
        allele_ranges: Sequence[RangeLike],
        allele_mutation_ranges: Optional[Sequence[Tuple[float, float]]] = None,
        seed_genes_list: Optional[List[List[float]]] = None,
    ):
        if not allele_ranges:
            raise InvalidGenotypeError(type(self).__name__, "allele_ranges must not be empty")
        self.allele_ranges = [parse_bounds(allele_range) for allele_range in allele_ranges]
        for bounds in self.allele_ranges:
            if bounds.is_empty():
                raise InvalidGenotypeError(type(self).__name__, f"allele range {bounds} is empty")
        if allele_mutation_ranges is not None:
            if len(allele_mutation_ranges) != len(self.allele_ranges):
                raise InvalidGenotypeError(
                    type(self).__name__,
                    "allele_mutation_ranges must have one entry per allele range",
                )
            for mutation_range in allele_mutation_ranges:
                _validate_mutation_range(type(self).__name__, mutation_range)
        self.allele_mutation_ranges = (
            list(allele_mutation_ranges) if allele_mutation_ranges is not None else None
        )
        # 寬度為 0 的範圍仍保有最小權重，避免所有權重為 0
        self._index_weights = [max(bounds.width, 1e-12) for bounds in self.allele_ranges]
        Genotype.__init__(self, len(self.allele_ranges), seed_genes_list)
        self.allele_range = self.allele_ranges[0]
        self.allele_mutation_range = None
        self._validate_seed_genes()

    def bounds_for(self, index: int) -> GeneBounds:
        return self.allele_ranges[index]

    def mutation_range_for(self, index: int) -> Optional[Tuple[float, float]]:
        if self.allele_mutation_ranges is None:
            return None
        return self.allele_mutation_ranges[index]

    def mutate_chromosome(
        self,
        chromosome: Chromosome,
        number_of_genes_to_mutate: int,
        rng: random.Random,
    ) -> None:
        # 不放回的加權抽樣：已選中的位置從候選名單移除
        candidates = list(range(self.genes_size))
        weights = list(self._index_weights)
        indexes = []
        for _ in range(min(number_of_genes_to_mutate, self.genes_size)):
            position = rng.choices(range(len(candidates)), weights=weights)[0]
            indexes.append(candidates.pop(position))
            weights.pop(position)
        for index in sorted(indexes):
            self.mutate_gene(chromosome.genes, index, rng)
        chromosome.taint()

    def __repr__(self) -> str:
        return f"MultiRangeGenotype(allele_ranges={self.allele_ranges})"

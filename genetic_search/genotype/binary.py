"""
二元基因型 (Binary Genotype)

基因為布林值列表。隨機生成時每個基因各有 50% 機率為 True 或 False，
突變時翻轉該基因的值。
"""

import random
from typing import Any, List, Optional

from genetic_search.evolution.models import Chromosome

from .base import Genotype


class BinaryGenotype(Genotype):
    """二元基因型

    Attributes:
        genes_size: 每條染色體的基因數
        seed_genes_list: 種子基因列表
    """

    def __init__(
        self,
        genes_size: int,
        seed_genes_list: Optional[List[List[bool]]] = None,
    ):
        super().__init__(genes_size, seed_genes_list)
        self._validate_seed_genes()

    def sample_genes(self, rng: random.Random) -> List[bool]:
        return [rng.random() < 0.5 for _ in range(self.genes_size)]

    def is_valid_genes(self, genes: Any) -> bool:
        return len(genes) == self.genes_size and all(
            isinstance(gene, bool) for gene in genes
        )

    def mutate_chromosome(
        self,
        chromosome: Chromosome,
        number_of_genes_to_mutate: int,
        rng: random.Random,
    ) -> None:
        for index in self.sample_gene_indexes(number_of_genes_to_mutate, rng):
            chromosome.genes[index] = not chromosome.genes[index]
        chromosome.taint()

    def neighbouring_chromosomes(
        self,
        chromosome: Chromosome,
        rng: random.Random,
    ) -> List[Chromosome]:
        neighbours = []
        for index in range(self.genes_size):
            genes = list(chromosome.genes)
            genes[index] = not genes[index]
            neighbours.append(self.chromosome_from_genes(genes))
        return neighbours

    @property
    def neighbouring_population_size(self) -> int:
        return self.genes_size

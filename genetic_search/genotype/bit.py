"""
位元壓縮基因型 (Bit-Packed Genotype)

基因以單一 Python int 儲存，第 i 個位元即第 i 個基因。
突變與交叉都以位元遮罩完成，不需逐基因存取。
"""

import random
from typing import Any, Hashable, List, Optional, Sequence

from genetic_search.evolution.models import Chromosome

from .base import Genotype


class BitGenotype(Genotype):
    """位元壓縮基因型

    與 BinaryGenotype 擁有相同的等位基因域 {0, 1}，但每條染色體只佔一個整數。

    Attributes:
        genes_size: 每條染色體的位元數
        seed_genes_list: 種子基因列表 (int)
    """

    def __init__(
        self,
        genes_size: int,
        seed_genes_list: Optional[List[int]] = None,
    ):
        super().__init__(genes_size, seed_genes_list)
        self._full_mask = (1 << genes_size) - 1
        self._validate_seed_genes()

    def sample_genes(self, rng: random.Random) -> int:
        return rng.getrandbits(self.genes_size)

    def is_valid_genes(self, genes: Any) -> bool:
        return isinstance(genes, int) and 0 <= genes <= self._full_mask

    def chromosome_from_genes(self, genes: Any) -> Chromosome:
        if not isinstance(genes, int):
            genes = self.pack(genes)
        return Chromosome(genes=genes)

    def clone_chromosome(self, chromosome: Chromosome) -> Chromosome:
        return Chromosome(
            genes=chromosome.genes,
            fitness_score=chromosome.fitness_score,
            age=chromosome.age,
        )

    def pack(self, bits: Sequence[Any]) -> int:
        """將位元序列 (索引 0 為最低位) 壓縮為整數"""
        value = 0
        for index, bit in enumerate(bits):
            if bit:
                value |= 1 << index
        return value

    def genes_as_list(self, chromosome: Chromosome) -> List[bool]:
        genes = chromosome.genes
        return [bool((genes >> index) & 1) for index in range(self.genes_size)]

    def genes_key(self, chromosome: Chromosome) -> Hashable:
        return chromosome.genes

    def count_ones(self, chromosome: Chromosome) -> int:
        return bin(chromosome.genes).count("1")

    def mutate_chromosome(
        self,
        chromosome: Chromosome,
        number_of_genes_to_mutate: int,
        rng: random.Random,
    ) -> None:
        mask = 0
        for index in self.sample_gene_indexes(number_of_genes_to_mutate, rng):
            mask |= 1 << index
        chromosome.genes ^= mask
        chromosome.taint()

    def _take_from_mother(self, child: Chromosome, mother: Chromosome, mask: int) -> None:
        child.genes = (child.genes & ~mask & self._full_mask) | (mother.genes & mask)

    def crossover_chromosome_indexes(
        self,
        child: Chromosome,
        mother: Chromosome,
        indexes: Sequence[int],
    ) -> None:
        mask = 0
        for index in indexes:
            mask |= 1 << index
        self._take_from_mother(child, mother, mask)
        child.taint()

    def crossover_chromosome_segment(
        self,
        child: Chromosome,
        mother: Chromosome,
        start: int,
        end: int,
    ) -> None:
        mask = ((1 << (end - start)) - 1) << start
        self._take_from_mother(child, mother, mask)

    def neighbouring_chromosomes(
        self,
        chromosome: Chromosome,
        rng: random.Random,
    ) -> List[Chromosome]:
        return [
            Chromosome(genes=chromosome.genes ^ (1 << index))
            for index in range(self.genes_size)
        ]

    @property
    def neighbouring_population_size(self) -> int:
        return self.genes_size

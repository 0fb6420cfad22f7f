"""
離散列表基因型 (List Genotypes)

ListGenotype: 所有基因共用同一個等位基因列表。
MultiListGenotype: 每個基因擁有自己的等位基因列表。
"""

import random
from typing import Any, List, Optional, Sequence

from genetic_search.evolution.exceptions import InvalidGenotypeError
from genetic_search.evolution.models import Chromosome

from .base import Genotype


class ListGenotype(Genotype):
    """離散列表基因型

    隨機生成時每個基因從 allele_list 均勻取樣；突變時以新取樣的等位基因取代。
    允許重複的等位基因。

    Attributes:
        genes_size: 每條染色體的基因數
        allele_list: 等位基因列表
    """

    def __init__(
        self,
        genes_size: int,
        allele_list: Sequence[Any],
        seed_genes_list: Optional[List[List[Any]]] = None,
    ):
        super().__init__(genes_size, seed_genes_list)
        if not allele_list:
            raise InvalidGenotypeError(type(self).__name__, "allele_list must not be empty")
        self.allele_list = list(allele_list)
        self._validate_seed_genes()

    def sample_genes(self, rng: random.Random) -> List[Any]:
        return [rng.choice(self.allele_list) for _ in range(self.genes_size)]

    def is_valid_genes(self, genes: Any) -> bool:
        return len(genes) == self.genes_size and all(
            gene in self.allele_list for gene in genes
        )

    def mutate_chromosome(
        self,
        chromosome: Chromosome,
        number_of_genes_to_mutate: int,
        rng: random.Random,
    ) -> None:
        for index in self.sample_gene_indexes(number_of_genes_to_mutate, rng):
            chromosome.genes[index] = rng.choice(self.allele_list)
        chromosome.taint()

    def neighbouring_chromosomes(
        self,
        chromosome: Chromosome,
        rng: random.Random,
    ) -> List[Chromosome]:
        neighbours = []
        for index in range(self.genes_size):
            for allele in dict.fromkeys(self.allele_list):
                if allele == chromosome.genes[index]:
                    continue
                genes = list(chromosome.genes)
                genes[index] = allele
                neighbours.append(self.chromosome_from_genes(genes))
        return neighbours

    @property
    def neighbouring_population_size(self) -> int:
        return self.genes_size * (len(set(self.allele_list)) - 1)

    def __repr__(self) -> str:
        return f"ListGenotype(genes_size={self.genes_size}, allele_list={self.allele_list!r})"


class MultiListGenotype(Genotype):
    """多列表基因型

    genes_size 等於 allele_lists 的數量。突變時以列表長度為權重挑選基因，
    再從該基因自己的列表取樣新值。

    Attributes:
        allele_lists: 每個基因位置的等位基因列表
    """

    def __init__(
        self,
        allele_lists: Sequence[Sequence[Any]],
        seed_genes_list: Optional[List[List[Any]]] = None,
    ):
        super().__init__(len(allele_lists), seed_genes_list)
        if any(len(allele_list) == 0 for allele_list in allele_lists):
            raise InvalidGenotypeError(type(self).__name__, "every allele list must be non-empty")
        self.allele_lists = [list(allele_list) for allele_list in allele_lists]
        self._index_weights = [len(allele_list) for allele_list in self.allele_lists]
        self._validate_seed_genes()

    def sample_genes(self, rng: random.Random) -> List[Any]:
        return [rng.choice(allele_list) for allele_list in self.allele_lists]

    def is_valid_genes(self, genes: Any) -> bool:
        return len(genes) == self.genes_size and all(
            gene in allele_list for gene, allele_list in zip(genes, self.allele_lists)
        )

    def mutate_chromosome(
        self,
        chromosome: Chromosome,
        number_of_genes_to_mutate: int,
        rng: random.Random,
    ) -> None:
        count = min(number_of_genes_to_mutate, self.genes_size)
        indexes = set()
        while len(indexes) < count:
            indexes.add(rng.choices(range(self.genes_size), weights=self._index_weights)[0])
        for index in sorted(indexes):
            chromosome.genes[index] = rng.choice(self.allele_lists[index])
        chromosome.taint()

    def neighbouring_chromosomes(
        self,
        chromosome: Chromosome,
        rng: random.Random,
    ) -> List[Chromosome]:
        neighbours = []
        for index, allele_list in enumerate(self.allele_lists):
            for allele in dict.fromkeys(allele_list):
                if allele == chromosome.genes[index]:
                    continue
                genes = list(chromosome.genes)
                genes[index] = allele
                neighbours.append(self.chromosome_from_genes(genes))
        return neighbours

    @property
    def neighbouring_population_size(self) -> int:
        return sum(len(set(allele_list)) - 1 for allele_list in self.allele_lists)

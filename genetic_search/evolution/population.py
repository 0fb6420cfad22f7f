"""
種群生成器 (Population Generator)

負責透過基因型生成初始種群，並提供多樣性與不變式檢查。
"""

import random
from typing import TYPE_CHECKING, List

from .exceptions import validate_population_size
from .models import Chromosome, Population

if TYPE_CHECKING:
    from genetic_search.genotype.base import Genotype


class PopulationGenerator:
    """種群生成器

    Attributes:
        genotype: 基因型
        population_size: 種群大小
    """

    def __init__(
        self,
        genotype: "Genotype",
        population_size: int,
    ):
        """初始化種群生成器

        Args:
            genotype: 用於生成隨機染色體的基因型
            population_size: 種群大小

        Raises:
            InvalidPopulationSizeError: 若 population_size < 2
        """
        validate_population_size(population_size)
        self.genotype = genotype
        self.population_size = population_size

    def generate_chromosomes(self, count: int, rng: random.Random) -> List[Chromosome]:
        """生成 count 條隨機染色體 (未評估、年齡 0)"""
        return [self.genotype.generate_random_chromosome(rng) for _ in range(count)]

    def generate_population(self, rng: random.Random) -> Population:
        """生成初始種群

        Args:
            rng: 隨機來源

        Returns:
            大小為 population_size 的種群
        """
        return Population(self.generate_chromosomes(self.population_size, rng))

    def check_diversity(self, population: Population) -> float:
        """檢查種群多樣性

        計算基因互不相同的染色體比例。

        Args:
            population: 種群

        Returns:
            多樣性比例 (0-1)，空種群為 0.0
        """
        if len(population) == 0:
            return 0.0
        distinct = {self.genotype.genes_key(chromosome) for chromosome in population}
        return len(distinct) / len(population)

    def validate_population(self, population: Population) -> bool:
        """驗證種群大小與每條染色體的等位基因域不變式

        Args:
            population: 種群

        Returns:
            所有不變式是否成立
        """
        if len(population) != self.population_size:
            return False
        return all(self.genotype.is_valid_chromosome(chromosome) for chromosome in population)

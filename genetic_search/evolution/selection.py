"""
選擇算子 (Selection Operators)

負責將種群依適應度排序並保留繁殖池，實作精英選擇與競賽選擇。
選擇只重新排序與截斷，不修改任何染色體的基因。
"""

import random
from typing import TYPE_CHECKING, Callable, List, Tuple

from .exceptions import InvalidParameterError, validate_fraction
from .models import Chromosome, Population, fitness_sort_key

if TYPE_CHECKING:
    from genetic_search.genotype.base import Genotype
    from .engine import EvolveConfig


class Select:
    """選擇算子基底類別

    繁殖池大小為 target_population_size * selection_rate (四捨五入)，
    至少為 2，至多為 target_population_size。

    設定 max_chromosome_age 時，年齡超過上限的染色體排在所有其他染色體之後，
    因此會最先被淘汰，只有在年輕染色體不足以填滿繁殖池時才會被保留。

    Attributes:
        selection_rate: 保留比例 (0, 1]
    """

    def __init__(self, selection_rate: float = 0.5):
        validate_fraction("selection_rate", selection_rate)
        self.selection_rate = selection_rate

    def pool_size(self, target_population_size: int) -> int:
        """計算繁殖池大小"""
        size = int(round(target_population_size * self.selection_rate))
        return min(target_population_size, max(2, size))

    def _rank_key(
        self,
        config: "EvolveConfig",
    ) -> Callable[[Chromosome], Tuple[bool, Tuple[int, int]]]:
        fitness_key = fitness_sort_key(config.fitness_ordering)
        max_age = config.max_chromosome_age

        def key(chromosome: Chromosome) -> Tuple[bool, Tuple[int, int]]:
            too_old = max_age is not None and chromosome.age > max_age
            return too_old, fitness_key(chromosome)

        return key

    def call(
        self,
        population: Population,
        genotype: "Genotype",
        config: "EvolveConfig",
        rng: random.Random,
    ) -> None:
        """就地選擇：種群重新排序為最佳優先，並截斷為繁殖池

        被淘汰的染色體交回 genotype 釋放儲存空間。
        """
        raise NotImplementedError

    def _truncate(
        self,
        population: Population,
        genotype: "Genotype",
        config: "EvolveConfig",
    ) -> None:
        for chromosome in population.truncate(self.pool_size(config.target_population_size)):
            genotype.release_chromosome(chromosome)


class SelectElite(Select):
    """精英選擇

    依適應度做穩定排序後保留前 pool_size 個染色體。
    """

    def call(
        self,
        population: Population,
        genotype: "Genotype",
        config: "EvolveConfig",
        rng: random.Random,
    ) -> None:
        population.chromosomes.sort(key=self._rank_key(config))
        self._truncate(population, genotype, config)

    def __repr__(self) -> str:
        return f"SelectElite(selection_rate={self.selection_rate})"


class SelectTournament(Select):
    """競賽選擇

    重複舉行不放回的競賽：每次從尚未勝出的染色體中隨機抽出
    tournament_size 個參與者，最佳者勝出並移出候選名單，
    直到選出 pool_size 個勝者。勝者最後依適應度做穩定排序。

    Attributes:
        selection_rate: 保留比例 (0, 1]
        tournament_size: 每場競賽的參與者數量
    """

    def __init__(self, selection_rate: float = 0.5, tournament_size: int = 4):
        """初始化競賽選擇

        Args:
            selection_rate: 保留比例，預設為 0.5
            tournament_size: 競賽參與者數量，預設為 4

        Raises:
            InvalidRateError: 若 selection_rate 不在 (0, 1] 範圍內
            InvalidParameterError: 若 tournament_size < 1
        """
        super().__init__(selection_rate)
        if tournament_size < 1:
            raise InvalidParameterError("tournament_size", tournament_size, "must be at least 1")
        self.tournament_size = tournament_size

    def call(
        self,
        population: Population,
        genotype: "Genotype",
        config: "EvolveConfig",
        rng: random.Random,
    ) -> None:
        rank_key = self._rank_key(config)
        pool_size = self.pool_size(config.target_population_size)
        candidates: List[int] = list(range(len(population)))
        winners: List[int] = []

        while len(winners) < pool_size and candidates:
            participants = rng.sample(candidates, min(self.tournament_size, len(candidates)))
            # 同分時以原始位置決勝，與穩定排序一致
            winner = min(participants, key=lambda i: (rank_key(population[i]), i))
            winners.append(winner)
            candidates.remove(winner)

        winners.sort(key=lambda i: (rank_key(population[i]), i))
        chosen = set(winners)
        for index, chromosome in enumerate(population):
            if index not in chosen:
                genotype.release_chromosome(chromosome)
        population.chromosomes = [population[i] for i in winners]

    def __repr__(self) -> str:
        return (
            f"SelectTournament(selection_rate={self.selection_rate}, "
            f"tournament_size={self.tournament_size})"
        )

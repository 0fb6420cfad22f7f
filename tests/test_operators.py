"""
Tests for the selection, crossover and mutation operators.
"""

from itertools import combinations
import random

import pytest
from hypothesis import given, strategies as st, settings

from genetic_search.evolution.crossover import (
    CrossoverClone,
    CrossoverMultiGene,
    CrossoverMultiPoint,
    CrossoverSingleGene,
    CrossoverSinglePoint,
    CrossoverUniform,
)
from genetic_search.evolution.engine import EvolveConfig
from genetic_search.evolution.exceptions import (
    IncompatibleOperatorError,
    InsufficientBreedingPoolError,
    InvalidParameterError,
    InvalidRateError,
)
from genetic_search.evolution.models import FitnessOrdering, Population
from genetic_search.evolution.mutation import MutateMultiGene, MutateSingleGene
from genetic_search.evolution.selection import SelectElite, SelectTournament
from genetic_search.genotype import (
    BinaryGenotype,
    MatrixGenotype,
    MultiUniqueGenotype,
    RangeGenotype,
    UniqueGenotype,
)


# =============================================================================
# Helpers
# =============================================================================

def make_config(target_population_size: int = 10, **kwargs) -> EvolveConfig:
    return EvolveConfig(target_population_size=target_population_size, max_generations=10, **kwargs)


def scored_population(genotype, scores, rng):
    chromosomes = []
    for score in scores:
        chromosome = genotype.generate_random_chromosome(rng)
        chromosome.fitness_score = score
        chromosomes.append(chromosome)
    return Population(chromosomes)


score_lists = st.lists(
    st.one_of(st.none(), st.integers(-50, 50)),
    min_size=10, max_size=10,
)


# =============================================================================
# Selection
# =============================================================================

class TestSelectElite:
    """Unit and property tests for SelectElite."""

    @given(scores=score_lists, ordering=st.sampled_from(list(FitnessOrdering)))
    @settings(max_examples=100)
    def test_keeps_best_prefix(self, scores, ordering: FitnessOrdering):
        """The breeding pool is the best pool_size chromosomes, best first."""
        genotype = BinaryGenotype(4)
        rng = random.Random(0)
        population = scored_population(genotype, scores, rng)
        config = make_config(fitness_ordering=ordering)
        select = SelectElite(selection_rate=0.5)

        select.call(population, genotype, config, rng)

        assert len(population) == 5
        kept = [c.fitness_score for c in population]
        present = sorted(
            (s for s in scores if s is not None),
            reverse=ordering == FitnessOrdering.MAXIMIZE,
        )
        expected = (present + [None] * 10)[:5]
        assert kept == expected

    def test_pool_size(self):
        """Pool size is rounded and kept between 2 and the target size."""
        assert SelectElite(0.25).pool_size(20) == 5
        assert SelectElite(0.01).pool_size(10) == 2
        assert SelectElite(1.0).pool_size(7) == 7

    def test_invalid_selection_rate(self):
        """selection_rate must lie in (0, 1]."""
        with pytest.raises(InvalidRateError):
            SelectElite(0.0)
        with pytest.raises(InvalidRateError):
            SelectElite(1.5)

    def test_dropped_chromosomes_are_released(self):
        """Dropped chromosomes hand their matrix rows back."""
        genotype = MatrixGenotype(3, 20, (0, 9))
        rng = random.Random(0)
        population = scored_population(genotype, list(range(10)), rng)
        assert genotype.free_row_count == 10

        SelectElite(0.5).call(population, genotype, make_config(), rng)

        assert genotype.free_row_count == 15

    def test_old_chromosomes_are_dropped_first(self):
        """Chromosomes older than max_chromosome_age rank below all others."""
        genotype = BinaryGenotype(4)
        rng = random.Random(0)
        population = scored_population(genotype, [100, 1, 2, 3], rng)
        population[0].age = 5
        config = make_config(target_population_size=4, max_chromosome_age=2)

        SelectElite(0.5).call(population, genotype, config, rng)

        assert [c.fitness_score for c in population] == [3, 2]


class TestSelectTournament:
    """Unit and property tests for SelectTournament."""

    @given(scores=score_lists, seed=st.integers(0, 10**6), tournament_size=st.integers(1, 6))
    @settings(max_examples=100)
    def test_pool_is_sorted_subset(self, scores, seed: int, tournament_size: int):
        """Winners are distinct members of the population ordered best first."""
        genotype = BinaryGenotype(4)
        rng = random.Random(seed)
        population = scored_population(genotype, scores, rng)
        original = {id(c) for c in population}
        config = make_config()

        SelectTournament(0.5, tournament_size).call(population, genotype, config, rng)

        assert len(population) == 5
        assert len({id(c) for c in population}) == 5
        assert {id(c) for c in population} <= original
        present = [c.fitness_score for c in population if c.fitness_score is not None]
        assert present == sorted(present, reverse=True)
        assert all(c.fitness_score is None for c in population.chromosomes[len(present):])

    def test_full_tournament_equals_elite(self):
        """A tournament over the whole population always picks the best remaining."""
        genotype = BinaryGenotype(4)
        rng = random.Random(3)
        population = scored_population(genotype, [5, 9, 1, 7, 3, 8], rng)
        config = make_config(target_population_size=6)

        SelectTournament(0.5, tournament_size=6).call(population, genotype, config, rng)

        assert [c.fitness_score for c in population] == [9, 8, 7]

    def test_invalid_tournament_size(self):
        """tournament_size must be at least 1."""
        with pytest.raises(InvalidParameterError, match="tournament_size"):
            SelectTournament(0.5, tournament_size=0)


# =============================================================================
# Crossover
# =============================================================================

class TestCrossoverValidation:
    """Configuration errors raised by Crossover.validate."""

    def test_insufficient_unique_pairs(self):
        """Five parents cannot produce fifteen offspring from distinct pairs."""
        genotype = BinaryGenotype(8)
        pool_size = SelectElite(0.25).pool_size(20)
        crossover = CrossoverUniform(elitism_size=5, allow_duplicates=False)
        with pytest.raises(InsufficientBreedingPoolError) as exc_info:
            crossover.validate(genotype, pool_size, 20)
        assert exc_info.value.offspring_needed == 15
        assert exc_info.value.available_pairs == 10

    def test_duplicates_allowed(self):
        """With pair reuse the same pool is sufficient."""
        genotype = BinaryGenotype(8)
        CrossoverUniform(elitism_size=5, allow_duplicates=True).validate(genotype, 5, 20)

    @pytest.mark.parametrize("crossover", [
        CrossoverUniform(),
        CrossoverSingleGene(),
        CrossoverMultiGene(2),
        CrossoverSinglePoint(),
        CrossoverMultiPoint(2),
    ])
    def test_unique_genotype_is_incompatible(self, crossover):
        """Gene and point crossovers would break a permutation."""
        with pytest.raises(IncompatibleOperatorError):
            crossover.validate(UniqueGenotype([1, 2, 3, 4]), 5, 10)

    def test_clone_works_everywhere(self):
        """CrossoverClone needs no crossover capability."""
        CrossoverClone().validate(UniqueGenotype([1, 2, 3, 4]), 5, 10)

    def test_multi_unique_supports_points_only(self):
        """MultiUnique allows point crossover but not gene crossover."""
        genotype = MultiUniqueGenotype([[1, 2], [3, 4]])
        CrossoverSinglePoint().validate(genotype, 5, 10)
        with pytest.raises(IncompatibleOperatorError):
            CrossoverUniform().validate(genotype, 5, 10)

    def test_elitism_larger_than_pool(self):
        """Elitism cannot keep more parents than the pool holds."""
        with pytest.raises(InvalidParameterError, match="elitism_size"):
            CrossoverClone(elitism_size=6).validate(BinaryGenotype(4), 5, 10)

    def test_pool_of_one(self):
        """A single parent cannot form a pair."""
        with pytest.raises(InsufficientBreedingPoolError):
            CrossoverClone().validate(BinaryGenotype(4), 1, 10)

    def test_invalid_number_of_crossovers(self):
        """number_of_crossovers must be at least 1."""
        with pytest.raises(InvalidParameterError):
            CrossoverMultiPoint(0)
        with pytest.raises(InvalidParameterError):
            CrossoverMultiGene(0)


class TestCrossoverCall:
    """Behaviour of Crossover.call."""

    @given(seed=st.integers(0, 10**6), count=st.integers(1, 10))
    @settings(max_examples=100)
    def test_unique_pairs_without_duplicates(self, seed: int, count: int):
        """Without duplicates every parent pair is used at most once."""
        pairs = CrossoverClone(allow_duplicates=False).parent_pairs(5, count, random.Random(seed))
        assert len(pairs) == count
        assert len(set(pairs)) == count
        assert set(pairs) <= set(combinations(range(5), 2))

    @given(seed=st.integers(0, 10**6))
    @settings(max_examples=100)
    def test_duplicate_pairs_use_two_parents(self, seed: int):
        """Each sampled pair holds two different parents."""
        pairs = CrossoverClone(allow_duplicates=True).parent_pairs(3, 20, random.Random(seed))
        assert all(father != mother for father, mother in pairs)

    @given(seed=st.integers(0, 10**6), elitism_size=st.integers(0, 5))
    @settings(max_examples=100)
    def test_restores_target_size_and_keeps_elites(self, seed: int, elitism_size: int):
        """Elites survive unchanged and offspring fill the population to target size."""
        genotype = BinaryGenotype(8)
        rng = random.Random(seed)
        pool = scored_population(genotype, [9, 8, 7, 6, 5], rng)
        for chromosome in pool:
            chromosome.age = 1
        elites = pool.chromosomes[:elitism_size]
        elite_genes = [list(c.genes) for c in elites]

        CrossoverUniform(elitism_size=elitism_size).call(pool, genotype, make_config(10), rng)

        assert len(pool) == 10
        assert pool.chromosomes[:elitism_size] == elites
        assert [list(c.genes) for c in elites] == elite_genes
        assert [c.fitness_score for c in elites] == [9, 8, 7, 6, 5][:elitism_size]
        for child in pool.chromosomes[elitism_size:]:
            assert child.fitness_score is None
            assert child.age == 0
            assert genotype.is_valid_chromosome(child)

    def test_non_elite_parents_are_released(self):
        """After breeding only elites and offspring occupy matrix rows."""
        genotype = MatrixGenotype(4, 15, (0, 9))
        rng = random.Random(0)
        pool = scored_population(genotype, [5, 4, 3, 2, 1], rng)

        CrossoverSinglePoint(elitism_size=2).call(pool, genotype, make_config(10), rng)

        assert len(pool) == 10
        assert genotype.free_row_count == 5
        assert len({c.row_id for c in pool}) == 10

    def test_clone_offspring_copy_a_parent(self):
        """Clone offspring carry the genes of one of the parents."""
        genotype = RangeGenotype(4, (0, 100))
        rng = random.Random(1)
        pool = scored_population(genotype, [3, 2, 1], rng)
        parent_genes = [list(c.genes) for c in pool]

        CrossoverClone().call(pool, genotype, make_config(6), rng)

        for child in pool:
            assert list(child.genes) in parent_genes


# =============================================================================
# Mutation
# =============================================================================

class TestMutate:
    """Unit tests for the mutation operators."""

    def _population(self, genotype, rng, ages):
        population = scored_population(genotype, [1] * len(ages), rng)
        for chromosome, age in zip(population, ages):
            chromosome.age = age
        return population

    def test_certain_mutation_skips_elites(self):
        """With only_offspring, chromosomes older than 0 are left alone."""
        genotype = BinaryGenotype(6)
        rng = random.Random(0)
        population = self._population(genotype, rng, [2, 1, 0, 0, 0])

        mutated = MutateSingleGene(1.0).call(population, genotype, make_config(), rng)

        assert mutated == 3
        assert [c.fitness_score for c in population] == [1, 1, None, None, None]

    def test_mutation_includes_elites_when_requested(self):
        """only_offspring=False mutates every chromosome."""
        genotype = BinaryGenotype(6)
        rng = random.Random(0)
        population = self._population(genotype, rng, [2, 1, 0])

        mutated = MutateMultiGene(1.0, 2, only_offspring=False).call(
            population, genotype, make_config(), rng
        )

        assert mutated == 3
        assert all(c.fitness_score is None for c in population)

    def test_zero_probability(self):
        """A zero probability never mutates."""
        genotype = BinaryGenotype(6)
        rng = random.Random(0)
        population = self._population(genotype, rng, [0, 0, 0])
        assert MutateSingleGene(0.0).call(population, genotype, make_config(), rng) == 0
        assert all(c.fitness_score == 1 for c in population)

    def test_invalid_probability(self):
        """mutation_probability must lie in [0, 1]."""
        with pytest.raises(InvalidRateError):
            MutateSingleGene(1.1)
        with pytest.raises(InvalidRateError):
            MutateSingleGene(-0.1)

    def test_invalid_number_of_mutations(self):
        """number_of_mutations must be at least 1."""
        with pytest.raises(InvalidParameterError):
            MutateMultiGene(0.5, 0)

    @given(seed=st.integers(0, 10**6))
    @settings(max_examples=50)
    def test_unique_mutation_keeps_population_valid(self, seed: int):
        """Mutating a permutation population keeps every chromosome a permutation."""
        genotype = UniqueGenotype(list(range(8)))
        rng = random.Random(seed)
        population = Population([genotype.generate_random_chromosome(rng) for _ in range(10)])
        MutateMultiGene(0.8, 3).call(population, genotype, make_config(), rng)
        assert all(genotype.is_valid_chromosome(c) for c in population)

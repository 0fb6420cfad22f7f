"""
Property-based tests for the evolution data model.

Tests fitness ordering, chromosome bookkeeping, population management and
population seeding.
"""

import math
import random

import pytest
from hypothesis import given, strategies as st, settings

from genetic_search.evolution.exceptions import InvalidPopulationSizeError
from genetic_search.evolution.models import (
    Chromosome,
    FitnessOrdering,
    Population,
    fitness_sort_key,
    is_better_fitness,
    meets_target,
    to_fitness_value,
)
from genetic_search.evolution.population import PopulationGenerator
from genetic_search.genotype import BinaryGenotype, UniqueGenotype


# =============================================================================
# Hypothesis Strategies
# =============================================================================

optional_scores = st.one_of(st.none(), st.integers(min_value=-1000, max_value=1000))
orderings = st.sampled_from(list(FitnessOrdering))


@st.composite
def population_strategy(draw, min_size=0, max_size=30):
    """Generate a population with optional scores and ages."""
    scores = draw(st.lists(optional_scores, min_size=min_size, max_size=max_size))
    return Population([
        Chromosome(genes=[i], fitness_score=score, age=draw(st.integers(0, 5)))
        for i, score in enumerate(scores)
    ])


# =============================================================================
# Fitness Ordering
# =============================================================================

class TestFitnessOrdering:
    """Absent scores are always worst, whatever the ordering."""

    @given(score=st.integers(), ordering=orderings)
    @settings(max_examples=100)
    def test_none_is_never_better(self, score: int, ordering: FitnessOrdering):
        """None never beats a score and every score beats None."""
        assert not is_better_fitness(None, score, ordering)
        assert is_better_fitness(score, None, ordering)
        assert not is_better_fitness(None, None, ordering)

    @given(a=st.integers(), b=st.integers())
    @settings(max_examples=100)
    def test_ordering_direction(self, a: int, b: int):
        """Maximize prefers larger scores, minimize prefers smaller scores."""
        assert is_better_fitness(a, b, FitnessOrdering.MAXIMIZE) == (a > b)
        assert is_better_fitness(a, b, FitnessOrdering.MINIMIZE) == (a < b)

    @given(population=population_strategy(), ordering=orderings)
    @settings(max_examples=100)
    def test_sort_places_none_last(self, population: Population, ordering: FitnessOrdering):
        """After sorting, every scored chromosome precedes every unscored one."""
        population.sort_by_fitness(ordering)
        scores = [c.fitness_score for c in population]
        first_none = next((i for i, s in enumerate(scores) if s is None), len(scores))
        assert all(s is None for s in scores[first_none:])

        present = scores[:first_none]
        if ordering == FitnessOrdering.MAXIMIZE:
            assert present == sorted(present, reverse=True)
        else:
            assert present == sorted(present)

    @given(population=population_strategy(), ordering=orderings)
    @settings(max_examples=100)
    def test_sort_is_stable(self, population: Population, ordering: FitnessOrdering):
        """Ties keep their original relative order."""
        original_positions = {id(c): i for i, c in enumerate(population)}
        population.sort_by_fitness(ordering)
        key = fitness_sort_key(ordering)
        for first, second in zip(population.chromosomes, population.chromosomes[1:]):
            if key(first) == key(second):
                assert original_positions[id(first)] < original_positions[id(second)]

    def test_meets_target(self):
        """Targets are inclusive in both directions."""
        assert meets_target(8, 8, FitnessOrdering.MAXIMIZE)
        assert not meets_target(7, 8, FitnessOrdering.MAXIMIZE)
        assert meets_target(0, 0, FitnessOrdering.MINIMIZE)
        assert not meets_target(1, 0, FitnessOrdering.MINIMIZE)
        assert not meets_target(None, 0, FitnessOrdering.MINIMIZE)

    def test_to_fitness_value(self):
        """Float scores scale onto the integer grid; non-finite values become None."""
        assert to_fitness_value(1.234567, 1e-3) == 1235
        assert to_fitness_value(-2.0) == -2
        assert to_fitness_value(math.nan) is None
        assert to_fitness_value(math.inf, 1e-3) is None


# =============================================================================
# Chromosome
# =============================================================================

class TestChromosome:
    """Unit tests for Chromosome."""

    def test_taint_clears_score_and_age(self):
        """taint() marks the chromosome as changed."""
        chromosome = Chromosome(genes=[True], fitness_score=3, age=4)
        chromosome.taint()
        assert chromosome.fitness_score is None
        assert chromosome.age == 0
        assert not chromosome.is_scored

    def test_defaults(self):
        """A new chromosome is unscored, age 0 and not bound to a matrix row."""
        chromosome = Chromosome(genes=[1, 2, 3])
        assert chromosome.fitness_score is None
        assert chromosome.age == 0
        assert chromosome.row_id is None


# =============================================================================
# Population
# =============================================================================

class TestPopulation:
    """Unit and property tests for Population."""

    @given(population=population_strategy(), size=st.integers(0, 40))
    @settings(max_examples=100)
    def test_truncate_returns_dropped(self, population: Population, size: int):
        """truncate keeps a prefix and returns exactly the dropped tail."""
        before = list(population.chromosomes)
        dropped = population.truncate(size)
        assert population.chromosomes == before[:size]
        assert dropped == before[size:]

    @given(population=population_strategy())
    @settings(max_examples=100)
    def test_cardinality(self, population: Population):
        """Cardinality counts distinct scores plus one for any absent score."""
        scores = [c.fitness_score for c in population]
        expected = len({s for s in scores if s is not None}) + (1 if None in scores else 0)
        assert population.fitness_score_cardinality() == expected

    @given(population=population_strategy(), ordering=orderings)
    @settings(max_examples=100)
    def test_best_and_worst(self, population: Population, ordering: FitnessOrdering):
        """Best and worst ignore unscored chromosomes."""
        present = [c.fitness_score for c in population if c.fitness_score is not None]
        best = population.best_chromosome(ordering)
        worst = population.worst_chromosome(ordering)
        if not present:
            assert best is None and worst is None
        elif ordering == FitnessOrdering.MAXIMIZE:
            assert best.fitness_score == max(present)
            assert worst.fitness_score == min(present)
        else:
            assert best.fitness_score == min(present)
            assert worst.fitness_score == max(present)

    def test_stddev(self):
        """Population standard deviation over present scores only."""
        population = Population([
            Chromosome(genes=[0], fitness_score=2),
            Chromosome(genes=[1], fitness_score=4),
            Chromosome(genes=[2], fitness_score=None),
        ])
        assert population.fitness_score_stddev() == pytest.approx(1.0)
        assert Population([Chromosome(genes=[0], fitness_score=5)]).fitness_score_stddev() == 0.0

    def test_increment_age_and_invalid_count(self):
        """increment_age ages every chromosome; invalid_count counts unscored ones."""
        population = Population([
            Chromosome(genes=[0], fitness_score=1, age=0),
            Chromosome(genes=[1], fitness_score=None, age=2),
        ])
        population.increment_age()
        assert [c.age for c in population] == [1, 3]
        assert population.invalid_count() == 1
        assert population.unscored() == [population[1]]


# =============================================================================
# Population Generator
# =============================================================================

class TestPopulationGenerator:
    """Unit and property tests for PopulationGenerator."""

    @given(population_size=st.integers(min_value=2, max_value=60), seed=st.integers(0, 10**6))
    @settings(max_examples=100)
    def test_generated_population_is_valid(self, population_size: int, seed: int):
        """A generated population has the requested size and valid chromosomes."""
        generator = PopulationGenerator(BinaryGenotype(6), population_size)
        population = generator.generate_population(random.Random(seed))
        assert len(population) == population_size
        assert generator.validate_population(population)

    def test_invalid_population_size(self):
        """Population size below 2 is rejected."""
        with pytest.raises(InvalidPopulationSizeError):
            PopulationGenerator(BinaryGenotype(4), 1)

    def test_check_diversity(self):
        """Diversity is the ratio of distinct genes."""
        genotype = BinaryGenotype(2)
        generator = PopulationGenerator(genotype, 4)
        population = Population([
            genotype.chromosome_from_genes([True, True]),
            genotype.chromosome_from_genes([True, True]),
            genotype.chromosome_from_genes([False, True]),
            genotype.chromosome_from_genes([False, False]),
        ])
        assert generator.check_diversity(population) == pytest.approx(0.75)
        assert generator.check_diversity(Population()) == 0.0

    def test_validate_population_detects_broken_permutation(self):
        """validate_population rejects chromosomes outside the allele domain."""
        genotype = UniqueGenotype([1, 2, 3])
        generator = PopulationGenerator(genotype, 2)
        population = generator.generate_population(random.Random(0))
        assert generator.validate_population(population)
        population[0].genes[0] = population[0].genes[1]
        assert not generator.validate_population(population)

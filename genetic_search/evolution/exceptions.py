"""
Evolve Engine Exception Classes

This module defines the exceptions raised by the evolutionary search engine.
Configuration errors are raised while an engine or operator is being set up,
before any generation runs. Runtime errors are fatal for the run in progress.

Every exception carries a message and an optional suggestion describing how
to fix the offending configuration.
"""

from typing import Any, Optional


class EvolutionError(Exception):
    """Base exception class for all evolution-related errors."""

    def __init__(self, message: str, suggestion: Optional[str] = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.suggestion:
            return f"{self.message}. Suggestion: {self.suggestion}"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================

class InvalidGenotypeError(EvolutionError):
    """
    Raised when a genotype is constructed with an unusable gene space.

    Examples are a genes_size of zero, an empty allele list or a range whose
    minimum exceeds its maximum.
    """

    def __init__(self, genotype_name: str, reason: str):
        self.genotype_name = genotype_name
        self.reason = reason
        message = f"Invalid {genotype_name}: {reason}"
        suggestion = "Provide a non-empty allele domain and a genes_size of at least 1"
        super().__init__(message, suggestion)


class InvalidPopulationSizeError(EvolutionError):
    """
    Raised when target_population_size is too small to breed.

    At least two chromosomes are needed to form a single parent pair.
    """

    MIN_SIZE = 2

    def __init__(self, population_size: int):
        self.population_size = population_size
        message = f"Invalid population size: {population_size}"
        suggestion = f"Population size must be at least {self.MIN_SIZE}"
        super().__init__(message, suggestion)


class InvalidRateError(EvolutionError):
    """
    Raised when a probability or rate lies outside its allowed interval.
    """

    def __init__(
        self,
        name: str,
        value: float,
        min_value: float = 0.0,
        max_value: float = 1.0,
        min_inclusive: bool = True,
    ):
        self.name = name
        self.value = value
        self.min_value = min_value
        self.max_value = max_value
        left = "[" if min_inclusive else "("
        message = f"Invalid {name}: {value}"
        suggestion = f"{name} must be in {left}{min_value}, {max_value}]"
        super().__init__(message, suggestion)


class InvalidParameterError(EvolutionError):
    """
    Raised when an integer operator or engine parameter is out of range.
    """

    def __init__(self, name: str, value: Any, requirement: str):
        self.name = name
        self.value = value
        message = f"Invalid {name}: {value}"
        suggestion = f"{name} {requirement}"
        super().__init__(message, suggestion)


class MissingTerminationConditionError(EvolutionError):
    """
    Raised when no stopping rule is configured, which would make the
    generation loop run forever.
    """

    def __init__(self):
        message = "No termination condition configured"
        suggestion = (
            "Set at least one of target_fitness_score, max_generations, "
            "max_stale_generations or max_duration"
        )
        super().__init__(message, suggestion)


class InsufficientBreedingPoolError(EvolutionError):
    """
    Raised when the breeding pool cannot produce the offspring needed to
    restore the population to its target size.

    Without pair reuse a pool of n parents offers n * (n - 1) / 2 distinct
    parent pairs, and every pair yields a single offspring.
    """

    def __init__(
        self,
        pool_size: int,
        offspring_needed: int,
        available_pairs: int,
    ):
        self.pool_size = pool_size
        self.offspring_needed = offspring_needed
        self.available_pairs = available_pairs
        message = (
            f"Breeding pool of {pool_size} parents offers {available_pairs} "
            f"unique parent pairs, but {offspring_needed} offspring are needed"
        )
        suggestion = (
            "Increase the selection rate, increase elitism, "
            "or allow duplicate parent pairs"
        )
        super().__init__(message, suggestion)


class IncompatibleOperatorError(EvolutionError):
    """
    Raised when an operator requires a capability the genotype lacks, for
    example gene crossover on a permutation genotype.
    """

    def __init__(self, operator_name: str, genotype_name: str, capability: str):
        self.operator_name = operator_name
        self.genotype_name = genotype_name
        self.capability = capability
        message = f"{operator_name} requires {capability}, which {genotype_name} does not support"
        suggestion = "Choose a crossover that the genotype supports, e.g. CrossoverClone"
        super().__init__(message, suggestion)


class PopulationCapacityError(EvolutionError):
    """
    Raised when a fixed-capacity genotype cannot hold the peak population of
    a generation.
    """

    def __init__(self, capacity: int, required: int):
        self.capacity = capacity
        self.required = required
        message = (
            f"Population capacity exceeded: buffer holds {capacity} chromosomes, "
            f"but {required} are required"
        )
        suggestion = f"Construct the genotype with max_population_size >= {required}"
        super().__init__(message, suggestion)


# =============================================================================
# Runtime Errors
# =============================================================================

class InvalidFitnessValueError(EvolutionError):
    """
    Raised when a fitness function returns something other than None or an
    integral number.
    """

    def __init__(self, value: Any):
        self.value = value
        message = f"Invalid fitness value {value!r} of type {type(value).__name__}"
        suggestion = (
            "Return an int (or None for invalid chromosomes); "
            "scale float scores with to_fitness_value()"
        )
        super().__init__(message, suggestion)


class FitnessEvaluationError(EvolutionError):
    """
    Raised when the fitness function fails during evaluation.

    A generation with missing scores is never trusted, so this is fatal for
    the run.
    """

    def __init__(self, generation: Optional[int], cause: BaseException):
        self.generation = generation
        self.cause = cause
        gen_info = f" in generation {generation}" if generation is not None else ""
        message = f"Fitness evaluation failed{gen_info}: {cause!r}"
        suggestion = "Make the fitness function total over the genotype's allele domain"
        super().__init__(message, suggestion)


# =============================================================================
# Utility Functions
# =============================================================================

def validate_population_size(size: int) -> None:
    """Validate population size is large enough to breed."""
    if size < InvalidPopulationSizeError.MIN_SIZE:
        raise InvalidPopulationSizeError(size)


def validate_probability(name: str, value: float) -> None:
    """Validate a probability lies within [0, 1]."""
    if value < 0.0 or value > 1.0:
        raise InvalidRateError(name, value)


def validate_fraction(name: str, value: float) -> None:
    """Validate a fraction lies within (0, 1]."""
    if value <= 0.0 or value > 1.0:
        raise InvalidRateError(name, value, min_inclusive=False)


def validate_non_negative(name: str, value: Optional[int]) -> None:
    """Validate an optional integer parameter is not negative."""
    if value is not None and value < 0:
        raise InvalidParameterError(name, value, "must be at least 0")


def validate_positive(name: str, value: Optional[int]) -> None:
    """Validate an optional integer parameter is at least 1."""
    if value is not None and value < 1:
        raise InvalidParameterError(name, value, "must be at least 1")

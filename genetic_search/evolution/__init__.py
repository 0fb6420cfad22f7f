"""
演化搜尋引擎 (Evolutionary Search Engine)

透過選擇、交叉、突變與滅絕事件，在任意基因型上演化種群以尋找最佳解。
"""

from .models import (
    FitnessValue,
    FitnessOrdering,
    Chromosome,
    Population,
    fitness_sort_key,
    is_better_fitness,
    meets_target,
    to_fitness_value,
)

from .population import (
    PopulationGenerator,
)

from .selection import (
    Select,
    SelectElite,
    SelectTournament,
)

from .crossover import (
    Crossover,
    CrossoverClone,
    CrossoverSingleGene,
    CrossoverMultiGene,
    CrossoverUniform,
    CrossoverSinglePoint,
    CrossoverMultiPoint,
)

from .mutation import (
    Mutate,
    MutateSingleGene,
    MutateMultiGene,
)

from .fitness import (
    Fitness,
    FunctionFitness,
    CountTrue,
    SimpleSum,
    FitnessEvaluator,
    validate_fitness_value,
)

from .extinction import (
    Extinction,
    MassExtinction,
    MassDegeneration,
)

from .generation import (
    EvolvePhase,
    TerminationReason,
    EvolveState,
    GenerationSnapshot,
)

from .reporter import (
    EvolveReporter,
    EvolveReporterNoop,
    EvolveReporterSimple,
    EvolveReporterHistory,
)

from .engine import (
    EvolveConfig,
    EvolveResult,
    Evolve,
)

from .exceptions import (
    EvolutionError,
    InvalidGenotypeError,
    InvalidPopulationSizeError,
    InvalidRateError,
    InvalidParameterError,
    MissingTerminationConditionError,
    InsufficientBreedingPoolError,
    IncompatibleOperatorError,
    PopulationCapacityError,
    InvalidFitnessValueError,
    FitnessEvaluationError,
    validate_population_size,
    validate_probability,
    validate_fraction,
    validate_non_negative,
    validate_positive,
)

__all__ = [
    # Models
    "FitnessValue",
    "FitnessOrdering",
    "Chromosome",
    "Population",
    "fitness_sort_key",
    "is_better_fitness",
    "meets_target",
    "to_fitness_value",
    # Population
    "PopulationGenerator",
    # Selection
    "Select",
    "SelectElite",
    "SelectTournament",
    # Crossover
    "Crossover",
    "CrossoverClone",
    "CrossoverSingleGene",
    "CrossoverMultiGene",
    "CrossoverUniform",
    "CrossoverSinglePoint",
    "CrossoverMultiPoint",
    # Mutation
    "Mutate",
    "MutateSingleGene",
    "MutateMultiGene",
    # Fitness
    "Fitness",
    "FunctionFitness",
    "CountTrue",
    "SimpleSum",
    "FitnessEvaluator",
    "validate_fitness_value",
    # Extinction
    "Extinction",
    "MassExtinction",
    "MassDegeneration",
    # Generation
    "EvolvePhase",
    "TerminationReason",
    "EvolveState",
    "GenerationSnapshot",
    # Reporter
    "EvolveReporter",
    "EvolveReporterNoop",
    "EvolveReporterSimple",
    "EvolveReporterHistory",
    # Engine
    "EvolveConfig",
    "EvolveResult",
    "Evolve",
    # Exceptions
    "EvolutionError",
    "InvalidGenotypeError",
    "InvalidPopulationSizeError",
    "InvalidRateError",
    "InvalidParameterError",
    "MissingTerminationConditionError",
    "InsufficientBreedingPoolError",
    "IncompatibleOperatorError",
    "PopulationCapacityError",
    "InvalidFitnessValueError",
    "FitnessEvaluationError",
    "validate_population_size",
    "validate_probability",
    "validate_fraction",
    "validate_non_negative",
    "validate_positive",
]

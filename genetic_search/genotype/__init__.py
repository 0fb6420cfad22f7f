"""
基因型 (Genotypes)

定義基因空間與其原生算子。演化引擎只依賴 Genotype 介面。
"""

from .models import (
    GeneType,
    GeneBounds,
    parse_bounds,
)

from .base import (
    Genotype,
    point_segments,
)

from .binary import (
    BinaryGenotype,
)

from .bit import (
    BitGenotype,
)

from .list_genotype import (
    ListGenotype,
    MultiListGenotype,
)

from .unique import (
    UniqueGenotype,
    MultiUniqueGenotype,
)

from .range_genotype import (
    RangeGenotype,
    MultiRangeGenotype,
)

from .matrix import (
    MatrixGenotype,
)

__all__ = [
    # Models
    "GeneType",
    "GeneBounds",
    "parse_bounds",
    # Base
    "Genotype",
    "point_segments",
    # Variants
    "BinaryGenotype",
    "BitGenotype",
    "ListGenotype",
    "MultiListGenotype",
    "UniqueGenotype",
    "MultiUniqueGenotype",
    "RangeGenotype",
    "MultiRangeGenotype",
    "MatrixGenotype",
]

"""
Distribution Services Package

Faire, reproduzierbare Fragenauswahl nach Verteilungsregeln.
"""

from .shuffle import fisher_yates_shuffle
from .distribution_resolver import DistributionResolver, Resolution, ResolvedQuestion

__all__ = [
    "fisher_yates_shuffle",
    "DistributionResolver",
    "Resolution",
    "ResolvedQuestion",
]

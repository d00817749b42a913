"""Candidate generation and ranking of identifier names."""

from namewise.renaming.candidates import CandidateGenerator
from namewise.renaming.factory import create_renamer
from namewise.renaming.formatting import FormattingAccuracy, FormattingRenamer
from namewise.renaming.models import Renaming
from namewise.renaming.renamers import (
    AllPriorRenamer,
    GrammarPriorRenamer,
    IdentifierRenamer,
    InterpolatedRenamer,
    PriorRenamer,
    TypePriorRenamer,
)

__all__ = [
    "AllPriorRenamer",
    "CandidateGenerator",
    "FormattingAccuracy",
    "FormattingRenamer",
    "GrammarPriorRenamer",
    "IdentifierRenamer",
    "InterpolatedRenamer",
    "PriorRenamer",
    "Renaming",
    "TypePriorRenamer",
    "create_renamer",
]

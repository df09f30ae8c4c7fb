from voyagematch.services.matching.budget_allocator import BudgetAllocation, allocate, calculate_nights
from voyagematch.services.matching.candidate_generator import PackageCandidate, generate_packages
from voyagematch.services.matching.config import MatchingPolicy, matching_policy
from voyagematch.services.matching.ranking import Facets, build_facets, rank_packages
from voyagematch.services.matching.scoring_engine import score_package, score_packages

__all__ = [
    "BudgetAllocation",
    "Facets",
    "MatchingPolicy",
    "PackageCandidate",
    "allocate",
    "build_facets",
    "calculate_nights",
    "generate_packages",
    "matching_policy",
    "rank_packages",
    "score_package",
    "score_packages",
]

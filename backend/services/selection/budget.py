"""Bullet budget allocation by rank and tenure."""


def bullet_budget(rank: int, tenure_months: int) -> int:
    """Max bullets an experience may contribute.

    Top roles get the most detail; beyond rank 4 the budget depends on
    tenure only.
    """
    if rank < 0:
        raise ValueError("rank must be >= 0")
    if rank <= 1:
        return 6
    if rank == 2:
        return 5
    if rank <= 4:
        return 4
    if tenure_months >= 48:
        return 4
    if tenure_months >= 24:
        return 3
    return 2


def writer_candidate_cap(budget: int) -> int:
    """Candidates handed to the writer: twice the budget, at least budget + 2."""
    return max(budget * 2, budget + 2)

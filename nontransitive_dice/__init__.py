"""
Non-transitive dice played against the house, with commit-reveal fairness on every random value.
"""

"""
Core round logic: dice validation, probabilities, commit-reveal generator and the round engine.
"""

"""Adaptation decisions — candidate generation, scoring and selection.

1. **Rules** (`rules.py`, `default_rules.py`) — typed condition predicates
2. **Generators** (`generators.py`) — rule, predictive, contextual, history
3. **Predictors** (`predictors.py`) — pluggable ``source=ml`` scorers
4. **Scoring** (`scoring.py`) — weighted multi-factor desirability
5. **Selection** (`selection.py`) — greedy, conflict-aware, never empty
6. **Engine** (`engine.py`) — one decision cycle end to end
"""

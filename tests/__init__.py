"""Refocus Test Suite

Test organization:
- unit/: Unit tests for individual modules
  - state/: Stores, TTL store, activity logger
  - detection/: Pattern detectors and commitment alignment
  - intervention/: Strategies, engine, presenter, gate
  - learning/: Effectiveness scoring, tracker, learner, selector, insights
- integration/: The focus loop end to end over a replayed day

Running tests:
    # All tests
    pytest

    # Specific area
    pytest tests/unit/learning/
"""

"""Nafsy services.

- crisis_detection: heuristic + optional AI crisis classification, runs on
  every user message before normal chat generation
- llm_service: completion clients used by the crisis AI classifier
"""

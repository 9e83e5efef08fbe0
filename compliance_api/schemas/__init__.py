"""Pydantic schemas package.

Folder intent:
  common.py       — CamelModel base + HealthResponse (all schemas inherit CamelModel)
  requirement.py  — requirement and equipment request DTOs / response models
  reports.py      — audit run result and dashboard report models
"""

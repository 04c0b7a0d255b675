"""
Task subsystem.

Components:
- task_models.py: data structures (Task, AIAnalysis, TaskDraft, enums)
- task_store.py: JSON file storage (whole-collection read-modify-write)
- task_api.py: creation pipeline, updates and insights used by connectors
"""

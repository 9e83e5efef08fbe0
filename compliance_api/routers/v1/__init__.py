"""v1 router package — all /api/v1/* endpoints live here.

Files:
  requirements.py  — requirement CRUD and linked equipment
  audit.py         — audit runs, overdue inspections, upcoming tasks
  stats.py         — statistics, summary, trends

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to compliance_api/services/.
"""

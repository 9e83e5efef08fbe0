"""Services package — all business logic lives here, never in routers.

Files:
  frequency.py    — due-date arithmetic for inspection cadences (pure)
  requirement.py  — requirement catalog CRUD + equipment linkage on create
  equipment.py    — equipment rows linked to equipment-category requirements
  audit_run.py    — batch audit run engine (per-record writes, run statistics)
  lease.py        — per-tenant advisory lease held during audit runs
  reports.py      — overdue / upcoming / statistics / summary / trend views

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""

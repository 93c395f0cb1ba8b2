# Routes package init
"""
Edward Backend — API Routes Package
=====================================

Route Inventory:
    - health.py:     GET  /health
    - user.py:       GET  /api/user/current, POST /api/user/upgrade
    - documents.py:  GET  /api/documents, POST /api/document/add|update|delete|content
    - chapters.py:   GET  /api/chapters/{document_id}, POST /api/chapter/update|arrange|delete
    - topics.py:     GET  /api/topics/{document_id}, POST /api/topic/update|arrange|delete
    - plans.py:      GET  /api/plans/{document_id}, POST /api/plan/update|arrange|delete,
                     POST /api/section/update|arrange|delete
    - workshops.py:  GET  /api/workshops/{document_id}, POST /api/workshop/update|delete

Routes are thin: parse the body, resolve the storage handle through
dependencies, call a service, wrap the result. Everything under /api except
/api/user requires a premium account.
"""

"""
CampusLog Backend — API Routes Package
========================================

What:  HTTP route handlers, one module per URL prefix.

Route Inventory:
    - buslog.py:        /api/buslog/{start-trip,end-trip,create-trip}
    - generatorlog.py:  /api/generatorlog/{start-run,end-run,create-log}
    - filelog.py:       /api/filelog/{register,forward,receive,status/{id}}
    - departments.py, employees.py, students.py:
                        /api/<table>/{create,update/{id},list,list/{fk}}
    - health.py:        GET /  and  GET /health
    - files.py:         GET /files/{path} (local blob store only)

Design Principle:
    Routes are THIN: read the form/body, call one service method, wrap the
    result in {"msg", "data"}. Errors are raised by services and formatted by
    the global handlers in main.py.
"""

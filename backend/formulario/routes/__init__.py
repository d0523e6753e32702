"""
Formulario Backend — API Routes Package
=========================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - users.py:     POST /api/users, GET /api/users/{id}, GET /api/users/email/{email}
    - books.py:     /api/books CRUD (soft delete)
    - formulas.py:  /api/formulas CRUD and listings (soft delete)
    - pdf.py:       GET /api/pdf/formula/{uuid}, GET /api/pdf/book/{book_uuid},
                    POST /api/pdf/custom
    - health.py:    GET /api/health

Design Principle:
    Routes are THIN. They extract input, call one service, and set status
    codes and headers. Errors are raised as exceptions and formatted by the
    global handlers in main.py.
"""

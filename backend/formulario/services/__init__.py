# Services package init
"""
Formulario Backend — Services Layer
=====================================

What:  Business logic between routes (HTTP) and the database.
How:   Each service is a stateless class with a module-level singleton.
       Services take an AsyncSession from the route and raise the domain
       exceptions in formulario.exceptions; routes never touch SQL.

Service Inventory:
    - UserService: upsert and lookup of client-identified users
    - BookService: book CRUD with soft delete, keyed by public UUID
    - FormulaService: formula CRUD with soft delete, plus the ordered
      selections the PDF exports need
    - PDFService: renders one formula or a collection to PDF bytes
"""

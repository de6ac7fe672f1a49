"""libraryapi core package.

Modules:
- models: Book and Loan tables
- repository: SQLModel data access for books and loans
- services: business rules (ISBN uniqueness, one outstanding loan per book)
- schedule: daily late-loan notification job
- mailer: SMTP mail dispatch
- app: FastAPI app and error mapping
- config: INI parsing and config object
"""

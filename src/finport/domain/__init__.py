"""Domain layer for finport.

Services live in their own modules (``finport.domain.statement_import`` and
friends) and are imported from there; this package stays import-free so the
database layer can depend on ``finport.domain.entities`` without cycles.
"""

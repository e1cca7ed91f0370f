"""jobs/ -- Job postings: domain dataclass and persistence.

Layer rule: jobs/ imports only stdlib, third-party libraries, and core/.
Ownership checks take the owner email as a plain argument; jobs/ never
imports from auth/ or api/.
"""

"""
Permission resolution feature module.

Answers "may this role perform this action on this module?" from an explicit
role table, and exposes the answer as FastAPI gates and check endpoints.
"""

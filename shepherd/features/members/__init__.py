"""
Members are the actors of the access-control engine: one organization, one
active role, and a join timestamp that drives tenure.
"""

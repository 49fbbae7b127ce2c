"""
Role model feature module.

Roles are configuration: a ranked ladder (newcomer → pastor) where each role
carries a module → grant map. The table is loaded once and passed explicitly
to the permission resolver and the navigation filter.
"""

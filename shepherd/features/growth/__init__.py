"""
Growth and promotion feature module.

Derives tenure/attendance/ministry metrics for members and recommends the next
role on the ladder using a versioned threshold table. Applying a
recommendation is a separate, root-only, audited write.
"""

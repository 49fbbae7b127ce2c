"""Append-only audit trail of role changes and other privileged mutations."""

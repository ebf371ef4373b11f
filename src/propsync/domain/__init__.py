"""Domain layer: reconciliation of repository properties against sources of truth."""

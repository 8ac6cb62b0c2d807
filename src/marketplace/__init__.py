"""Multi-store marketplace ordering."""

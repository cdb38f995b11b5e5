"""HTTP service layer."""

"""Business logic for the contest portal, one module per workflow."""

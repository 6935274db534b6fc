"""HTTP surface of the scheduling engine."""

"""Application layer – dispatching and read-side queries."""

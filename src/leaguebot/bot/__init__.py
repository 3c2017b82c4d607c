"""Bot wiring: construction of the shared service graph."""

"""Mission Manager - mission assignment, reporting and delegation backend."""

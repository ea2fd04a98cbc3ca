"""Resource Operation Facades, one per API family."""

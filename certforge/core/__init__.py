"""Pipeline core: metadata building, orchestration, reconciliation."""

"""Fleet Ops back office."""

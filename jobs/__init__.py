"""Analysis job lifecycle: inline runs, deferred runs and their persisted state."""

"""Infrastructure modules: database models, sessions and migrations."""

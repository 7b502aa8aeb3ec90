from .main_pipeline import main

# Alias for convenience
run_pipeline = main

__all__ = [
    'main',
    'run_pipeline',
]

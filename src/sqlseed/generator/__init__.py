"""Record generation: constraints, column context, values and orchestration."""

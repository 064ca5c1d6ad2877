"""Assessment engine: lifecycle, constraint evaluation, monitoring and notification."""

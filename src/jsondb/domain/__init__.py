"""Domain layer: command variants, result shapes, comparison rules, errors."""

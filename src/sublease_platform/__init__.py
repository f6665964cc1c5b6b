"""Campus sublease marketplace backend."""

"""stackseed -- generates a Spring Boot + static frontend + PostgreSQL project skeleton."""

__version__ = "0.1.0"

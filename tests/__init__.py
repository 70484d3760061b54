"""
Arcade Test Suite
=================

Test Organization
-----------------
- tests/unit/          : Fast unit tests with mocks (no external dependencies)
- tests/integration/   : Integration tests against SQLite, plus PostgreSQL
                         race tests through testcontainers

Testing Philosophy
------------------
- Unit tests: Fast, isolated, test business logic
- Integration tests: Slower, test real storage interactions
- Use pytest markers to categorize and selectively run tests
- Follow AAA pattern: Arrange, Act, Assert
"""

"""
Marne Status Bot Test Suite
===========================

Test Organization
-----------------
- tests/unit/ : Fast unit tests with mocks and in-process HTTP servers
  (no Discord connection, no access to marne.io)

Testing Philosophy
------------------
- Test one behavior per test
- Follow AAA pattern: Arrange, Act, Assert
- Use pytest markers to categorize and selectively run tests
"""

"""
Machigai Backend Test Suite

Test structure:
- unit/: Test components in isolation with fakes
- integration/: Full generation and play-through scenarios
- mocks/: Fake content provider
"""

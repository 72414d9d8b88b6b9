"""Game session engine.

- `state_machine.py`: pure transition function (Session + Event -> Session)
- `controller.py`: SessionController, the authoritative owner of a session
- `matcher.py`: click-to-difference matching
- `ticker.py`: elapsed-time ticker
- `protocols.py`: ContentProvider interface

Import directly from submodules:
    from machigai.engine.controller import SessionController
    from machigai.engine.matcher import match
"""

# Note: No eager imports to avoid circular import issues

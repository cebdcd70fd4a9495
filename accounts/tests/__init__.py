"""
Accounts App Tests

This package contains tests for:
- test_context.py: auth/profile context state machine and signals
- test_services.py: registration, sign-in checks, passwords, profile edits
- test_moderation.py: admin users section and self-targeting guard
- test_views.py / test_api.py: pages, gating decorators and API endpoints
- test_consumers.py: live users listing over WebSocket
- test_adapter.py: Google sign-in profile creation and ban checks
"""

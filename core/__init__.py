"""
Core - Shared Infrastructure for Kivvly

This package provides the building blocks shared by the accounts and places
apps:
- Data sources (one-shot reads and change-notified subscriptions)
- Local collections patched optimistically after writes
- Slice pagination
- Error taxonomy and the DRF exception handler
- Image compression and blob storage
- Place autocomplete and IP geolocation
"""

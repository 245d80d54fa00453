"""
Feature modules.

- status: Marne server list fetching and the `ServerStatus` record
- presence: Discord presence formatting and banner rendering
"""

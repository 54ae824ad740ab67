"""Domain tools owned by individual specialists.

- Geocoding lookup: address specialist
- Cost database: damage specialist
- Text reverser: test specialist
"""

"""
Logbook App - Training hours and RMP tracking

Reservists log training time, either as a clock-in/clock-out range or as a
manual number of hours. Every full 3.0 hours of unbundled time can be filed
as one RMP (a Bundle); filed RMPs are then tracked as submitted or paid.

Architecture:
- Models: LogEntry, Bundle
- Services: pure bundling core (plan_bundle, plan_consolidation) applied
  transactionally by submit_bundle / delete_bundle; log CRUD; balances
- Views: RESTful API with ViewSets
- Permissions: ownership and lock guards
- Exceptions: domain exceptions in services, API exceptions for views
"""

"""TLD configuration: transition schedules and staged mutation validation.

Schedules hold the time-varying TLD attributes (state, renew cost, EAP fee).
The validator and mutation service turn an old revision plus a set of
overrides into a validated new revision.
"""

"""Crew attendance engine.

Feature modules (ranking, calendar, stats, attendance, invites, ...) follow the
same layout: a frozen-dataclass model, a Protocol repository, an optional MySQL
repository and a service. Calculators are pure functions over fetched rows;
only the attendance recorder and the invite-code issuer write back.
"""
